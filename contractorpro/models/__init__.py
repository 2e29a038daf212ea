"""Models package — import all models so metadata.create_all can discover them."""

from contractorpro.models.role import Role, Permission, RolePermission
from contractorpro.models.user import User, UserRole
from contractorpro.models.hr import Department, Employee, Contract, Leave, LeaveStatus
from contractorpro.models.activity_log import ActivityLog

__all__ = [
    "Role", "Permission", "RolePermission",
    "User", "UserRole",
    "Department", "Employee", "Contract", "Leave", "LeaveStatus",
    "ActivityLog",
]
