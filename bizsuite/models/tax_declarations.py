from __future__ import annotations

from datetime import datetime
from typing import Literal, Optional

from pydantic import Field

from bizsuite.models.common import ApiModel, CompanyFilterParams, EntityModel

TaxRegime = Literal["old", "new"]
DeclarationStatus = Literal["draft", "submitted", "verified", "locked"]


class _DeductionFields(ApiModel):
    # to_camel does not split on digits, so the section fields carry explicit aliases.
    sec80c_ppf: Optional[float] = Field(default=None, alias="sec80cPpf")
    sec80c_elss: Optional[float] = Field(default=None, alias="sec80cElss")
    sec80c_life_insurance: Optional[float] = Field(default=None, alias="sec80cLifeInsurance")
    sec80c_home_loan_principal: Optional[float] = Field(default=None, alias="sec80cHomeLoanPrincipal")
    sec80c_children_tuition: Optional[float] = Field(default=None, alias="sec80cChildrenTuition")
    sec80c_nsc: Optional[float] = Field(default=None, alias="sec80cNsc")
    sec80c_others: Optional[float] = Field(default=None, alias="sec80cOthers")
    sec80ccd_nps: Optional[float] = Field(default=None, alias="sec80ccdNps")
    sec80d_self_spouse_children: Optional[float] = Field(default=None, alias="sec80dSelfSpouseChildren")
    sec80d_parents: Optional[float] = Field(default=None, alias="sec80dParents")
    sec80d_preventive_checkup: Optional[float] = Field(default=None, alias="sec80dPreventiveCheckup")
    sec24_home_loan_interest: Optional[float] = Field(default=None, alias="sec24HomeLoanInterest")
    hra_rent_paid_annual: Optional[float] = None
    hra_metro_city: Optional[bool] = None
    hra_landlord_pan: Optional[str] = None
    other_deductions: Optional[float] = None


class TaxDeclaration(EntityModel, _DeductionFields):
    employee_id: str
    employee_name: Optional[str] = None
    financial_year: str
    tax_regime: TaxRegime = "new"
    status: DeclarationStatus = "draft"
    submitted_at: Optional[datetime] = None
    verified_at: Optional[datetime] = None
    verified_by: Optional[str] = None

    @property
    def sec80c_total(self) -> float:
        parts = (
            self.sec80c_ppf,
            self.sec80c_elss,
            self.sec80c_life_insurance,
            self.sec80c_home_loan_principal,
            self.sec80c_children_tuition,
            self.sec80c_nsc,
            self.sec80c_others,
        )
        return float(sum(p or 0 for p in parts))


class CreateTaxDeclarationDto(_DeductionFields):
    employee_id: str = Field(min_length=1)
    company_id: Optional[str] = None
    financial_year: str = Field(pattern=r"^\d{4}-\d{2}$")
    tax_regime: Optional[TaxRegime] = "new"


class UpdateTaxDeclarationDto(_DeductionFields):
    tax_regime: Optional[TaxRegime] = None


class TaxDeclarationsFilterParams(CompanyFilterParams):
    employee_id: Optional[str] = None
    financial_year: Optional[str] = None
    tax_regime: Optional[str] = None
    status: Optional[str] = None
