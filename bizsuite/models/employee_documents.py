from __future__ import annotations

from datetime import date
from typing import Optional

from pydantic import Field

from bizsuite.models.common import ApiModel, CompanyFilterParams, EntityModel


class EmployeeDocument(EntityModel):
    employee_id: Optional[str] = None
    document_type: str
    title: str
    description: Optional[str] = None
    file_id: Optional[str] = None
    file_name: Optional[str] = None
    file_url: Optional[str] = None
    mime_type: Optional[str] = None
    file_size: Optional[int] = None
    expiry_date: Optional[date] = None
    is_company_wide: bool = False


class CreateEmployeeDocumentDto(ApiModel):
    company_id: Optional[str] = None
    employee_id: Optional[str] = None
    document_type: str = Field(min_length=1)
    title: str = Field(min_length=1)
    description: Optional[str] = None
    file_id: Optional[str] = None
    file_name: Optional[str] = None
    file_url: Optional[str] = None
    mime_type: Optional[str] = None
    file_size: Optional[int] = None
    expiry_date: Optional[date] = None
    is_company_wide: Optional[bool] = False


class UpdateEmployeeDocumentDto(ApiModel):
    document_type: Optional[str] = None
    title: Optional[str] = None
    description: Optional[str] = None
    file_id: Optional[str] = None
    file_name: Optional[str] = None
    file_url: Optional[str] = None
    mime_type: Optional[str] = None
    file_size: Optional[int] = None
    expiry_date: Optional[date] = None
    is_company_wide: Optional[bool] = None


class EmployeeDocumentsFilterParams(CompanyFilterParams):
    employee_id: Optional[str] = None
    document_type: Optional[str] = None
    is_company_wide: Optional[bool] = None
