"""HR API router — employees, contracts, and leave requests.

Every contract leaves this module through ``render_contract`` so that
compensation figures only reach privileged viewers.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session

from contractorpro.db.session import get_db
from contractorpro.schemas.schemas import (
    EmployeeCreate, EmployeeUpdate, EmployeeOut, ContractCreate, ContractUpdate,
    LeaveCreate, LeaveDecision, LeaveOut,
)
from contractorpro.services.hr_service import hr_service
from contractorpro.services.activity_service import activity_service
from contractorpro.core.rbac import RequireRole
from contractorpro.core.roles import RoleKey, STAFF_ROLES
from contractorpro.core.security import Principal
from contractorpro.core.visibility import render_contract

router = APIRouter(tags=["hr"])

require_staff = RequireRole(*STAFF_ROLES)
require_hr_editor = RequireRole(RoleKey.SYSTEM_ADMIN, RoleKey.HR_MANAGER)
require_contract_reader = RequireRole(
    RoleKey.SYSTEM_ADMIN, RoleKey.CEO, RoleKey.CFO, RoleKey.HR_MANAGER,
    RoleKey.ACCOUNTANT, RoleKey.SUPERVISOR, RoleKey.ENGINEER,
)
require_leave_reader = RequireRole(
    RoleKey.SYSTEM_ADMIN, RoleKey.HR_MANAGER, RoleKey.SUPERVISOR,
    RoleKey.CEO, RoleKey.CFO, RoleKey.ENGINEER, RoleKey.EMPLOYEE,
)
require_leave_filer = RequireRole(
    RoleKey.SYSTEM_ADMIN, RoleKey.HR_MANAGER, RoleKey.SUPERVISOR,
    RoleKey.ENGINEER, RoleKey.EMPLOYEE,
)
require_leave_approver = RequireRole(RoleKey.SYSTEM_ADMIN, RoleKey.HR_MANAGER, RoleKey.SUPERVISOR)


# ---- Employees ----

@router.get("/employees", response_model=List[EmployeeOut])
async def list_employees(
    search: Optional[str] = Query(None),
    status: Optional[str] = Query(None),
    department_id: Optional[int] = Query(None, alias="departmentId"),
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_staff),
):
    """List employees. Self-scoped callers only see their own record."""
    return hr_service.list_employees(db, principal, search, status, department_id)


@router.get("/employees/{employee_id}", response_model=EmployeeOut)
async def get_employee(
    employee_id: int,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_staff),
):
    return hr_service.get_employee(db, employee_id, principal)


@router.post("/employees", response_model=EmployeeOut, status_code=201)
async def create_employee(
    body: EmployeeCreate,
    request: Request,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_hr_editor),
):
    employee = hr_service.create_employee(db, **body.model_dump())
    activity_service.record_from_request(
        db, request,
        actor_id=principal.user_id,
        action_type="employee.create",
        entity_type="employee",
        entity_id=employee.id,
        description=f"Created employee {employee.code}",
    )
    return employee


@router.put("/employees/{employee_id}", response_model=EmployeeOut)
async def update_employee(
    employee_id: int,
    body: EmployeeUpdate,
    request: Request,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_hr_editor),
):
    result = hr_service.update_employee(db, principal, employee_id, **body.model_dump(exclude_unset=True))
    activity_service.record_from_request(
        db, request,
        actor_id=principal.user_id,
        action_type="employee.update",
        entity_type="employee",
        entity_id=employee_id,
        metadata={"before": result["before"], "after": result["after"]},
    )
    return result["employee"]


@router.get("/employees/{employee_id}/contracts")
async def list_employee_contracts(
    employee_id: int,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_staff),
):
    hr_service.get_employee(db, employee_id, principal)
    contracts = hr_service.list_contracts(db, principal, employee_id=employee_id)
    return [render_contract(c, principal.roles) for c in contracts]


@router.post("/employees/{employee_id}/contracts", status_code=201)
async def create_contract(
    employee_id: int,
    body: ContractCreate,
    request: Request,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_hr_editor),
):
    contract = hr_service.create_contract(db, employee_id, **body.model_dump())
    activity_service.record_from_request(
        db, request,
        actor_id=principal.user_id,
        action_type="contract.create",
        entity_type="contract",
        entity_id=contract.id,
        metadata={"employee_id": employee_id, "type": contract.type},
    )
    return render_contract(contract, principal.roles)


# ---- Contracts ----

@router.get("/contracts")
async def list_contracts(
    employee_id: Optional[int] = Query(None, alias="employeeId"),
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_contract_reader),
):
    contracts = hr_service.list_contracts(db, principal, employee_id=employee_id)
    return [render_contract(c, principal.roles) for c in contracts]


@router.get("/contracts/{contract_id}")
async def get_contract(
    contract_id: int,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_contract_reader),
):
    contract = hr_service.get_contract(db, contract_id, principal)
    return render_contract(contract, principal.roles)


@router.put("/contracts/{contract_id}")
async def update_contract(
    contract_id: int,
    body: ContractUpdate,
    request: Request,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_hr_editor),
):
    changes = body.model_dump(exclude_unset=True)
    contract = hr_service.update_contract(db, contract_id, **changes)
    activity_service.record_from_request(
        db, request,
        actor_id=principal.user_id,
        action_type="contract.update",
        entity_type="contract",
        entity_id=contract_id,
        metadata={"fields": sorted(changes)},
    )
    return render_contract(contract, principal.roles)


# ---- Leaves ----

@router.get("/leaves", response_model=List[LeaveOut])
async def list_leaves(
    status: Optional[str] = Query(None),
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_leave_reader),
):
    return hr_service.list_leaves(db, principal, status)


@router.post("/leaves", response_model=LeaveOut, status_code=201)
async def request_leave(
    body: LeaveCreate,
    request: Request,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_leave_filer),
):
    fields = body.model_dump()
    employee_id = fields.pop("employee_id")
    leave = hr_service.request_leave(db, principal, employee_id, **fields)
    activity_service.record_from_request(
        db, request,
        actor_id=principal.user_id,
        action_type="leave.create",
        entity_type="leave",
        entity_id=leave.id,
        metadata={"employee_id": employee_id, "type": leave.type},
    )
    return leave


@router.patch("/leaves/{leave_id}/approve", response_model=LeaveOut)
async def decide_leave(
    leave_id: int,
    body: LeaveDecision,
    request: Request,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_leave_approver),
):
    """Approve or reject a pending leave request."""
    result = hr_service.decide_leave(db, leave_id, body.status, principal.user_id, body.notes)
    activity_service.record_from_request(
        db, request,
        actor_id=principal.user_id,
        action_type="leave.status.update",
        entity_type="leave",
        entity_id=leave_id,
        metadata={"before": result["before"], "after": result["after"]},
    )
    return result["leave"]
