"""Field-level visibility: restricted-field redaction and self-scoping."""

from typing import Any, Callable, Iterable, List, Mapping, Optional, TypeVar, Union

from sqlalchemy import false

from contractorpro.core.exceptions import AuthorizationError
from contractorpro.core.roles import PRIVILEGED_ROLES, SELF_SCOPED_ROLES
from contractorpro.core.security import Principal
from contractorpro.schemas.schemas import ContractFullOut, ContractOut

T = TypeVar("T")

# Compensation figures on a contract record
CONTRACT_RESTRICTED_FIELDS = ("basic_salary", "allowances_json")


def can_view_restricted(viewer_roles: Iterable[str]) -> bool:
    return not PRIVILEGED_ROLES.isdisjoint(viewer_roles)


def sanitize(
    record: Mapping[str, Any],
    viewer_roles: Iterable[str],
    restricted_fields: Iterable[str] = CONTRACT_RESTRICTED_FIELDS,
) -> dict:
    """Return a copy of ``record`` fit for ``viewer_roles``.

    Privileged viewers get every field. Everyone else gets the record with
    the restricted keys removed entirely; public fields are untouched.
    """
    if can_view_restricted(viewer_roles):
        return dict(record)
    hidden = set(restricted_fields)
    return {k: v for k, v in record.items() if k not in hidden}


def contract_view(contract, viewer_roles: Iterable[str]) -> Union[ContractOut, ContractFullOut]:
    """Pick the contract shape the viewer may receive.

    Must be applied on every path that serializes a contract.
    """
    viewer_roles = frozenset(viewer_roles)
    record = sanitize(ContractFullOut.model_validate(contract).model_dump(), viewer_roles)
    if can_view_restricted(viewer_roles):
        return ContractFullOut.model_validate(record)
    return ContractOut.model_validate(record)


def render_contract(contract, viewer_roles: Iterable[str]) -> dict:
    """JSON-ready contract payload with camelCase keys."""
    return contract_view(contract, viewer_roles).model_dump(by_alias=True, mode="json")


def is_self_scoped(roles: Iterable[str]) -> bool:
    """True when every role held is a self-scoped role."""
    roles = frozenset(roles)
    return bool(roles) and roles <= SELF_SCOPED_ROLES


def scope_query(query, owner_column, principal: Principal):
    """Narrow a SQLAlchemy query to rows owned by a self-scoped principal."""
    if not is_self_scoped(principal.roles):
        return query
    if principal.user_id is None:
        return query.filter(false())
    return query.filter(owner_column == principal.user_id)


def filter_owned(
    records: Iterable[T],
    principal: Principal,
    owner_of: Callable[[T], Optional[int]],
) -> List[T]:
    """In-memory counterpart of :func:`scope_query`."""
    records = list(records)
    if not is_self_scoped(principal.roles):
        return records
    return [r for r in records if owner_of(r) is not None and owner_of(r) == principal.user_id]


def ensure_owner(principal: Principal, owner_user_id: Optional[int]) -> None:
    """Reject a self-scoped principal touching a record it does not own."""
    if is_self_scoped(principal.roles) and (
        owner_user_id is None or owner_user_id != principal.user_id
    ):
        raise AuthorizationError("Access denied")
