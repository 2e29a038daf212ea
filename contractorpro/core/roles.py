"""Static role/permission catalog and the declared role hierarchy."""

import enum
from typing import Iterable


class RoleKey(str, enum.Enum):
    SYSTEM_ADMIN = "system_admin"
    CEO = "ceo"
    CFO = "cfo"
    ACCOUNTANT = "accountant"
    HR_MANAGER = "hr_manager"
    SUPERVISOR = "supervisor"
    ENGINEER = "engineer"
    EMPLOYEE = "employee"


class PermissionKey(str, enum.Enum):
    MANAGE_USERS = "manage_users"
    VIEW_EMPLOYEES = "view_employees"
    EDIT_EMPLOYEES = "edit_employees"
    VIEW_CONTRACT_VALUES = "view_contract_values"
    MANAGE_PAYROLL = "manage_payroll"
    APPROVE_ADVANCES = "approve_advances"
    VIEW_FINANCE_REPORTS = "view_finance_reports"
    VIEW_ACTIVITY_LOGS = "view_activity_logs"
    VIEW_ACTIVITY_ANALYTICS = "view_activity_analytics"
    MANAGE_ACTIVITY_RETENTION = "manage_activity_retention"


ROLE_DISPLAY_NAMES = {
    RoleKey.SYSTEM_ADMIN: "System Administrator",
    RoleKey.CEO: "Chief Executive Officer",
    RoleKey.CFO: "Chief Financial Officer",
    RoleKey.ACCOUNTANT: "Accountant",
    RoleKey.HR_MANAGER: "HR Manager",
    RoleKey.SUPERVISOR: "Site Supervisor",
    RoleKey.ENGINEER: "Engineer",
    RoleKey.EMPLOYEE: "Employee",
}

PERMISSION_DISPLAY_NAMES = {
    PermissionKey.MANAGE_USERS: "Manage users",
    PermissionKey.VIEW_EMPLOYEES: "View employees",
    PermissionKey.EDIT_EMPLOYEES: "Edit employees",
    PermissionKey.VIEW_CONTRACT_VALUES: "View contract values",
    PermissionKey.MANAGE_PAYROLL: "Manage payroll",
    PermissionKey.APPROVE_ADVANCES: "Approve advances",
    PermissionKey.VIEW_FINANCE_REPORTS: "View finance reports",
    PermissionKey.VIEW_ACTIVITY_LOGS: "View activity logs",
    PermissionKey.VIEW_ACTIVITY_ANALYTICS: "View activity analytics",
    PermissionKey.MANAGE_ACTIVITY_RETENTION: "Manage activity retention",
}

# Declared implication data. Route guards match literal role keys unless
# RBAC_EXPAND_ROLE_HIERARCHY is enabled.
ROLE_HIERARCHY: dict[str, frozenset[str]] = {
    RoleKey.SYSTEM_ADMIN.value: frozenset(r.value for r in RoleKey),
    RoleKey.CEO.value: frozenset({
        RoleKey.CEO.value, RoleKey.CFO.value, RoleKey.HR_MANAGER.value,
        RoleKey.SUPERVISOR.value, RoleKey.ENGINEER.value, RoleKey.EMPLOYEE.value,
    }),
    RoleKey.CFO.value: frozenset({
        RoleKey.CFO.value, RoleKey.ACCOUNTANT.value, RoleKey.EMPLOYEE.value,
    }),
    RoleKey.ACCOUNTANT.value: frozenset({RoleKey.ACCOUNTANT.value, RoleKey.EMPLOYEE.value}),
    RoleKey.HR_MANAGER.value: frozenset({
        RoleKey.HR_MANAGER.value, RoleKey.SUPERVISOR.value,
        RoleKey.ENGINEER.value, RoleKey.EMPLOYEE.value,
    }),
    RoleKey.SUPERVISOR.value: frozenset({RoleKey.SUPERVISOR.value, RoleKey.EMPLOYEE.value}),
    RoleKey.ENGINEER.value: frozenset({RoleKey.ENGINEER.value}),
    RoleKey.EMPLOYEE.value: frozenset({RoleKey.EMPLOYEE.value}),
}

DEFAULT_ROLE_PERMISSIONS: dict[str, list[str]] = {
    RoleKey.SYSTEM_ADMIN.value: [p.value for p in PermissionKey],
    RoleKey.CEO.value: [
        PermissionKey.VIEW_EMPLOYEES.value,
        PermissionKey.VIEW_CONTRACT_VALUES.value,
        PermissionKey.MANAGE_PAYROLL.value,
        PermissionKey.VIEW_FINANCE_REPORTS.value,
    ],
    RoleKey.CFO.value: [
        PermissionKey.MANAGE_PAYROLL.value,
        PermissionKey.APPROVE_ADVANCES.value,
        PermissionKey.VIEW_FINANCE_REPORTS.value,
    ],
    RoleKey.ACCOUNTANT.value: [
        PermissionKey.MANAGE_PAYROLL.value,
        PermissionKey.APPROVE_ADVANCES.value,
    ],
    RoleKey.HR_MANAGER.value: [
        PermissionKey.VIEW_EMPLOYEES.value,
        PermissionKey.EDIT_EMPLOYEES.value,
    ],
    RoleKey.SUPERVISOR.value: [PermissionKey.VIEW_EMPLOYEES.value],
    RoleKey.ENGINEER.value: [PermissionKey.VIEW_EMPLOYEES.value],
    RoleKey.EMPLOYEE.value: [PermissionKey.VIEW_EMPLOYEES.value],
}

# Roles allowed to see compensation figures.
PRIVILEGED_ROLES = frozenset({
    RoleKey.SYSTEM_ADMIN.value,
    RoleKey.CEO.value,
    RoleKey.CFO.value,
    RoleKey.HR_MANAGER.value,
})

# Roles whose visible record set is narrowed to records they own.
SELF_SCOPED_ROLES = frozenset({RoleKey.EMPLOYEE.value, RoleKey.ENGINEER.value})

STAFF_ROLES = (
    RoleKey.SYSTEM_ADMIN, RoleKey.CEO, RoleKey.CFO, RoleKey.HR_MANAGER,
    RoleKey.SUPERVISOR, RoleKey.ENGINEER, RoleKey.EMPLOYEE,
)


def key_of(item) -> str:
    """Plain string key of a RoleKey/PermissionKey member or raw key."""
    return item.value if isinstance(item, enum.Enum) else str(item)


def implied_roles(role) -> frozenset[str]:
    """Roles implied by ``role``; a custom role implies only itself."""
    key = key_of(role)
    return ROLE_HIERARCHY.get(key, frozenset({key}))


def expand_roles(roles: Iterable) -> frozenset[str]:
    """Close a role set over the declared hierarchy."""
    expanded: set[str] = set()
    for role in roles:
        expanded |= implied_roles(role)
    return frozenset(expanded)
