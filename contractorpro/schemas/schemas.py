"""Pydantic schemas for API request/response serialization."""

import json
from pydantic import BaseModel, Field, computed_field, field_validator, model_validator
from pydantic.alias_generators import to_camel
from typing import Optional, List, Dict, Any, Literal
from datetime import date, datetime


# ---- Auth ----
class LoginRequest(BaseModel):
    email: str = Field(..., min_length=4)
    password: str = Field(..., min_length=6)

class TokenResponse(BaseModel):
    token: str
    token_type: str = "bearer"
    expires_in: int
    user: Dict[str, Any]

class PrincipalOut(BaseModel):
    subject: str
    roles: List[str]
    permissions: List[str]


# ---- IAM ----
class UserOut(BaseModel):
    id: int
    email: str
    full_name: Optional[str] = None
    phone: Optional[str] = None
    is_active: bool = True
    roles: List[str] = []
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True

    @field_validator("roles", mode="before")
    @classmethod
    def role_keys(cls, value):
        return [getattr(r, "key", r) for r in value or []]

class UserCreate(BaseModel):
    email: str = Field(..., min_length=4, max_length=255)
    password: str = Field(..., min_length=8, max_length=128)
    full_name: Optional[str] = None
    phone: Optional[str] = None
    role_keys: List[str] = []

class UserRolesUpdate(BaseModel):
    role_keys: List[str]

class RoleCreate(BaseModel):
    key: str = Field(..., min_length=2, max_length=50, pattern=r"^[a-z][a-z0-9_]*$")
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None

class RoleOut(BaseModel):
    id: int
    key: str
    name: str
    description: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class PermissionOut(BaseModel):
    id: int
    key: str
    name: str
    description: Optional[str] = None

    class Config:
        from_attributes = True

class RolePermissionsUpdate(BaseModel):
    permission_keys: List[str]

class RolePermissionsOut(BaseModel):
    role_id: int
    role_key: str
    permissions: List[str]


# ---- HR ----
def _reject_nulls(model: BaseModel, fields) -> None:
    """Partial updates may omit these fields but not set them to null."""
    nulled = [name for name in fields if name in model.model_fields_set and getattr(model, name) is None]
    if nulled:
        raise ValueError(f"{', '.join(nulled)} cannot be null")


class CamelModel(BaseModel):
    """HR payloads use camelCase on the wire and accept either spelling on input."""

    class Config:
        from_attributes = True
        alias_generator = to_camel
        populate_by_name = True


class EmployeeCreate(CamelModel):
    code: str = Field(..., min_length=1, max_length=50)
    full_name: str = Field(..., min_length=1)
    job_title: Optional[str] = None
    status: str = "active"
    user_id: Optional[int] = None
    department_id: Optional[int] = None

class EmployeeUpdate(CamelModel):
    code: Optional[str] = Field(None, min_length=1, max_length=50)
    full_name: Optional[str] = Field(None, min_length=1)
    job_title: Optional[str] = None
    status: Optional[str] = None
    user_id: Optional[int] = None
    department_id: Optional[int] = None

    @model_validator(mode="after")
    def check_required_fields(self) -> "EmployeeUpdate":
        _reject_nulls(self, ("code", "full_name", "status"))
        return self

class EmployeeOut(CamelModel):
    id: int
    code: str
    full_name: str
    job_title: Optional[str] = None
    status: str
    user_id: Optional[int] = None
    department_id: Optional[int] = None
    created_at: Optional[datetime] = None


def _parse_allowances(value):
    if isinstance(value, str):
        return json.loads(value) if value else None
    return value


class ContractCreate(CamelModel):
    type: str = Field(..., min_length=1)
    start_date: date
    end_date: Optional[date] = None
    probation_end: Optional[date] = None
    basic_salary: float = Field(..., ge=0)
    allowances_json: Optional[Dict[str, Any]] = None
    currency: str = Field("SAR", min_length=3, max_length=3)
    visibility_scope: str = "restricted"

    @model_validator(mode="after")
    def check_dates(self) -> "ContractCreate":
        if self.end_date and self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        return self

class ContractUpdate(CamelModel):
    type: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    probation_end: Optional[date] = None
    basic_salary: Optional[float] = Field(None, ge=0)
    allowances_json: Optional[Dict[str, Any]] = None
    currency: Optional[str] = Field(None, min_length=3, max_length=3)
    visibility_scope: Optional[str] = None

    @model_validator(mode="after")
    def check_required_fields(self) -> "ContractUpdate":
        _reject_nulls(self, ("type", "start_date", "basic_salary", "currency", "visibility_scope"))
        if self.start_date and self.end_date and self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        return self

class ContractOut(CamelModel):
    """Restricted contract view: no compensation figures."""
    id: int
    employee_id: int
    type: str
    start_date: date
    end_date: Optional[date] = None
    probation_end: Optional[date] = None
    currency: str
    visibility_scope: str = "restricted"
    created_at: Optional[datetime] = None

    @computed_field
    @property
    def status(self) -> str:
        today = date.today()
        if self.start_date > today:
            return "draft"
        if self.end_date and self.end_date < today:
            return "closed"
        return "active"

class ContractFullOut(ContractOut):
    """Full contract view, including restricted compensation fields."""
    basic_salary: float
    allowances_json: Optional[Dict[str, Any]] = None

    @field_validator("allowances_json", mode="before")
    @classmethod
    def parse_allowances(cls, value):
        return _parse_allowances(value)


class LeaveCreate(CamelModel):
    employee_id: int
    type: str = Field(..., min_length=1)
    start_date: date
    end_date: date
    notes: Optional[str] = None

    @model_validator(mode="after")
    def check_dates(self) -> "LeaveCreate":
        if self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        return self

class LeaveDecision(CamelModel):
    status: Literal["approved", "rejected"]
    notes: Optional[str] = None

class LeaveOut(CamelModel):
    id: int
    employee_id: int
    type: str
    start_date: date
    end_date: date
    status: str
    notes: Optional[str] = None
    approved_by: Optional[int] = None
    created_at: Optional[datetime] = None


# ---- Activity ----
class ActivityLogOut(BaseModel):
    id: int
    actor_id: Optional[int] = None
    action_type: str
    entity_type: str
    entity_id: Optional[str] = None
    description: Optional[str] = None
    metadata_json: Optional[str] = None
    ip_address: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class CountOut(BaseModel):
    key: Optional[str] = None
    count: int

class TopUserOut(BaseModel):
    user_id: Optional[int] = None
    email: Optional[str] = None
    count: int

class ActivityAnalyticsOut(BaseModel):
    total_events: int
    unique_actors: int
    entities: List[CountOut]
    actions: List[CountOut]
    daily: List[CountOut]
    top_users: List[TopUserOut]

class SnapshotRequest(BaseModel):
    snapshot_date: Optional[date] = Field(None, alias="date")

    class Config:
        populate_by_name = True

class SnapshotOut(BaseModel):
    success: bool = True
    key: str
    count: int

