"""Department, Employee, Contract and Leave models."""

from sqlalchemy import (
    Column, Integer, String, Text, Date, DateTime, Numeric, ForeignKey, func,
)
from sqlalchemy.orm import relationship
from contractorpro.db.base import Base


class Department(Base):
    """Organizational unit mapped to a cost center."""
    __tablename__ = "departments"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    cost_center_code = Column(String(50), unique=True, nullable=False, index=True)


class Employee(Base):
    """Staff record, optionally linked to a login account."""
    __tablename__ = "employees"

    id = Column(Integer, primary_key=True, autoincrement=True)
    code = Column(String(50), unique=True, nullable=False, index=True)
    full_name = Column(String(255), nullable=False)
    job_title = Column(String(255), nullable=True)
    status = Column(String(20), default="active", nullable=False)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    department_id = Column(Integer, ForeignKey("departments.id"), nullable=True)
    created_at = Column(DateTime, server_default=func.now(), nullable=False)

    department = relationship("Department", lazy="joined")
    contracts = relationship("Contract", back_populates="employee", lazy="selectin")


class Contract(Base):
    """Employment contract. ``basic_salary`` and ``allowances_json`` are restricted fields."""
    __tablename__ = "contracts"

    id = Column(Integer, primary_key=True, autoincrement=True)
    employee_id = Column(Integer, ForeignKey("employees.id", ondelete="CASCADE"), nullable=False, index=True)
    type = Column(String(50), nullable=False)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=True)
    probation_end = Column(Date, nullable=True)
    basic_salary = Column(Numeric(14, 2), nullable=False)
    allowances_json = Column(Text, nullable=True)  # JSON object of allowance name -> amount
    currency = Column(String(3), default="SAR", nullable=False)
    visibility_scope = Column(String(20), default="restricted", nullable=False)
    created_at = Column(DateTime, server_default=func.now(), nullable=False)

    employee = relationship("Employee", back_populates="contracts", lazy="joined")


class LeaveStatus:
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class Leave(Base):
    """Leave request filed for an employee."""
    __tablename__ = "leaves"

    id = Column(Integer, primary_key=True, autoincrement=True)
    employee_id = Column(Integer, ForeignKey("employees.id", ondelete="CASCADE"), nullable=False, index=True)
    type = Column(String(50), nullable=False)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    status = Column(String(20), default=LeaveStatus.PENDING, nullable=False)
    notes = Column(String(1000), nullable=True)
    approved_by = Column(Integer, ForeignKey("users.id"), nullable=True)
    created_at = Column(DateTime, server_default=func.now(), nullable=False)
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now(), nullable=False)

    employee = relationship("Employee", lazy="joined")
