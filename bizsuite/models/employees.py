from __future__ import annotations

from datetime import date
from typing import Optional

from pydantic import Field

from bizsuite.models.common import ApiModel, CompanyFilterParams, EntityModel


class Employee(EntityModel):
    employee_name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    employee_id: Optional[str] = None  # company-issued employee code, not the record id
    department: Optional[str] = None
    designation: Optional[str] = None
    hire_date: Optional[date] = None
    status: str = "active"
    city: Optional[str] = None
    state: Optional[str] = None
    country: str = "India"
    contract_type: Optional[str] = None
    pan_number: Optional[str] = None
    manager_id: Optional[str] = None
    manager_name: Optional[str] = None


class CreateEmployeeDto(ApiModel):
    employee_name: str = Field(min_length=1)
    company_id: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    employee_id: Optional[str] = None
    department: Optional[str] = None
    designation: Optional[str] = None
    hire_date: Optional[date] = None
    status: Optional[str] = "active"
    city: Optional[str] = None
    state: Optional[str] = None
    country: Optional[str] = "India"
    contract_type: Optional[str] = None
    pan_number: Optional[str] = None
    manager_id: Optional[str] = None


class UpdateEmployeeDto(ApiModel):
    employee_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    employee_id: Optional[str] = None
    department: Optional[str] = None
    designation: Optional[str] = None
    hire_date: Optional[date] = None
    status: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    country: Optional[str] = None
    contract_type: Optional[str] = None
    pan_number: Optional[str] = None
    manager_id: Optional[str] = None


class EmployeesFilterParams(CompanyFilterParams):
    employee_name: Optional[str] = None
    employee_id: Optional[str] = None
    department: Optional[str] = None
    designation: Optional[str] = None
    status: Optional[str] = None
    city: Optional[str] = None
    contract_type: Optional[str] = None
