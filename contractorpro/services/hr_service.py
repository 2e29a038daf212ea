"""HR service — employees, contracts, and leave requests."""

import json
from typing import Optional, List, Dict, Any

from sqlalchemy import or_
from sqlalchemy.orm import Session

from contractorpro.models.hr import Department, Employee, Contract, Leave, LeaveStatus
from contractorpro.core.exceptions import (
    ResourceConflictError, ResourceNotFoundError, ValidationError,
)
from contractorpro.core.security import Principal
from contractorpro.core.visibility import scope_query, ensure_owner

# Non-nullable contract columns that a partial update may touch
CONTRACT_REQUIRED_FIELDS = ("type", "start_date", "basic_salary", "currency", "visibility_scope")


class HrService:
    """Employee-owned records, narrowed for self-scoped principals."""

    # ---- Employees ----

    @staticmethod
    def list_employees(
        db: Session,
        principal: Principal,
        search: Optional[str] = None,
        status: Optional[str] = None,
        department_id: Optional[int] = None,
    ) -> List[Employee]:
        query = scope_query(db.query(Employee), Employee.user_id, principal)
        if status:
            query = query.filter(Employee.status == status)
        if department_id:
            query = query.filter(Employee.department_id == department_id)
        if search:
            pattern = f"%{search}%"
            query = query.filter(or_(Employee.full_name.ilike(pattern), Employee.code.ilike(pattern)))
        return query.order_by(Employee.full_name).all()

    @staticmethod
    def get_employee(db: Session, employee_id: int, principal: Optional[Principal] = None) -> Employee:
        employee = db.query(Employee).filter(Employee.id == employee_id).first()
        if not employee:
            raise ResourceNotFoundError(f"Employee {employee_id} not found")
        if principal is not None:
            ensure_owner(principal, employee.user_id)
        return employee

    @staticmethod
    def _check_department(db: Session, department_id: Optional[int]) -> None:
        if department_id is not None and not db.query(Department).filter(Department.id == department_id).first():
            raise ValidationError("Unknown department", issues={"department_id": department_id})

    @staticmethod
    def create_employee(db: Session, **fields) -> Employee:
        if db.query(Employee).filter(Employee.code == fields["code"]).first():
            raise ResourceConflictError(f"Employee code {fields['code']} already exists")
        HrService._check_department(db, fields.get("department_id"))
        employee = Employee(**fields)
        db.add(employee)
        db.commit()
        db.refresh(employee)
        return employee

    @staticmethod
    def update_employee(db: Session, principal: Principal, employee_id: int, **fields) -> Dict[str, Any]:
        """Apply a partial update. Returns the employee with before/after snapshots."""
        employee = HrService.get_employee(db, employee_id, principal)
        code = fields.get("code")
        if code and code != employee.code and db.query(Employee).filter(Employee.code == code).first():
            raise ResourceConflictError(f"Employee code {code} already exists")
        if "department_id" in fields:
            HrService._check_department(db, fields["department_id"])

        before = {name: getattr(employee, name) for name in fields}
        for name, value in fields.items():
            setattr(employee, name, value)
        db.commit()
        db.refresh(employee)
        return {
            "employee": employee,
            "before": before,
            "after": {name: getattr(employee, name) for name in fields},
        }

    # ---- Contracts ----

    @staticmethod
    def list_contracts(
        db: Session,
        principal: Principal,
        employee_id: Optional[int] = None,
    ) -> List[Contract]:
        query = db.query(Contract).join(Employee, Contract.employee_id == Employee.id)
        query = scope_query(query, Employee.user_id, principal)
        if employee_id:
            query = query.filter(Contract.employee_id == employee_id)
        return query.order_by(Contract.start_date.desc(), Contract.id.desc()).all()

    @staticmethod
    def get_contract(db: Session, contract_id: int, principal: Optional[Principal] = None) -> Contract:
        contract = db.query(Contract).filter(Contract.id == contract_id).first()
        if not contract:
            raise ResourceNotFoundError(f"Contract {contract_id} not found")
        if principal is not None:
            ensure_owner(principal, contract.employee.user_id)
        return contract

    @staticmethod
    def create_contract(db: Session, employee_id: int, **fields) -> Contract:
        HrService.get_employee(db, employee_id)
        allowances = fields.pop("allowances_json", None)
        contract = Contract(
            employee_id=employee_id,
            allowances_json=json.dumps(allowances or {}),
            **fields,
        )
        db.add(contract)
        db.commit()
        db.refresh(contract)
        return contract

    @staticmethod
    def update_contract(db: Session, contract_id: int, **fields) -> Contract:
        contract = HrService.get_contract(db, contract_id)
        nulled = sorted(name for name in CONTRACT_REQUIRED_FIELDS if name in fields and fields[name] is None)
        if nulled:
            raise ValidationError("Fields cannot be null", issues={"fields": nulled})
        if "allowances_json" in fields:
            fields["allowances_json"] = json.dumps(fields["allowances_json"] or {})
        for name, value in fields.items():
            setattr(contract, name, value)
        if contract.end_date and contract.end_date < contract.start_date:
            db.rollback()
            raise ValidationError("end_date must not be before start_date")
        db.commit()
        db.refresh(contract)
        return contract

    # ---- Leaves ----

    @staticmethod
    def list_leaves(db: Session, principal: Principal, status: Optional[str] = None) -> List[Leave]:
        query = db.query(Leave).join(Employee, Leave.employee_id == Employee.id)
        query = scope_query(query, Employee.user_id, principal)
        if status:
            query = query.filter(Leave.status == status)
        return query.order_by(Leave.start_date.desc(), Leave.id.desc()).all()

    @staticmethod
    def request_leave(db: Session, principal: Principal, employee_id: int, **fields) -> Leave:
        """File a pending leave. Self-scoped principals may only file for themselves."""
        HrService.get_employee(db, employee_id, principal)
        leave = Leave(employee_id=employee_id, status=LeaveStatus.PENDING, **fields)
        db.add(leave)
        db.commit()
        db.refresh(leave)
        return leave

    @staticmethod
    def decide_leave(
        db: Session,
        leave_id: int,
        status: str,
        approver_id: Optional[int],
        notes: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Approve or reject a pending leave. Returns before/after snapshots."""
        leave = db.query(Leave).filter(Leave.id == leave_id).first()
        if not leave:
            raise ResourceNotFoundError(f"Leave {leave_id} not found")
        if leave.status != LeaveStatus.PENDING:
            raise ResourceConflictError(f"Leave {leave_id} is already {leave.status}")

        before = {"status": leave.status, "notes": leave.notes}
        leave.status = status
        if notes is not None:
            leave.notes = notes
        leave.approved_by = approver_id
        db.commit()
        db.refresh(leave)
        return {
            "leave": leave,
            "before": before,
            "after": {"status": leave.status, "notes": leave.notes, "approved_by": leave.approved_by},
        }


hr_service = HrService()
