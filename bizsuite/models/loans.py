from __future__ import annotations

from datetime import date
from typing import Literal, Optional

from pydantic import Field

from bizsuite.models.common import ApiModel, CompanyFilterParams, EntityModel

LoanType = Literal["secured", "unsecured", "asset_financing"]
InterestType = Literal["fixed", "floating", "reducing"]
LoanStatus = Literal["active", "closed", "foreclosed", "defaulted"]


class Loan(EntityModel):
    loan_name: str
    lender_name: str
    loan_type: LoanType = "secured"
    asset_id: Optional[str] = None
    principal_amount: float
    interest_rate: float
    loan_start_date: date
    loan_end_date: Optional[date] = None
    tenure_months: int
    emi_amount: float = 0.0
    outstanding_principal: float = 0.0
    interest_type: InterestType = "fixed"
    status: LoanStatus = "active"
    loan_account_number: Optional[str] = None
    notes: Optional[str] = None


class CreateLoanDto(ApiModel):
    loan_name: str = Field(min_length=1)
    lender_name: str = Field(min_length=1)
    company_id: Optional[str] = None
    loan_type: Optional[LoanType] = "secured"
    asset_id: Optional[str] = None
    principal_amount: float = Field(gt=0)
    interest_rate: float = Field(ge=0)
    loan_start_date: date
    loan_end_date: Optional[date] = None
    tenure_months: int = Field(gt=0)
    emi_amount: Optional[float] = None
    outstanding_principal: Optional[float] = None
    interest_type: Optional[InterestType] = "fixed"
    loan_account_number: Optional[str] = None
    notes: Optional[str] = None


class UpdateLoanDto(ApiModel):
    loan_name: Optional[str] = None
    lender_name: Optional[str] = None
    loan_type: Optional[LoanType] = None
    asset_id: Optional[str] = None
    interest_rate: Optional[float] = Field(default=None, ge=0)
    loan_end_date: Optional[date] = None
    emi_amount: Optional[float] = None
    outstanding_principal: Optional[float] = None
    interest_type: Optional[InterestType] = None
    status: Optional[LoanStatus] = None
    loan_account_number: Optional[str] = None
    notes: Optional[str] = None


class LoansFilterParams(CompanyFilterParams):
    loan_type: Optional[str] = None
    status: Optional[str] = None
    lender_name: Optional[str] = None
