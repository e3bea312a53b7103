from __future__ import annotations

from fastapi import APIRouter

from bizsuite.app.dependencies import MockDependencies
from bizsuite.app.modules.crud import ResourceSpec, add_crud_routes
from bizsuite.models.loans import CreateLoanDto, Loan, LoansFilterParams, UpdateLoanDto


def _prepare(_: MockDependencies, data: dict) -> dict:
    if data.get("outstanding_principal") is None:
        data["outstanding_principal"] = data.get("principal_amount")
    data.setdefault("status", "active")
    return data


SPEC = ResourceSpec(
    entity="loan",
    label="Loan",
    model=Loan,
    create_model=CreateLoanDto,
    update_model=UpdateLoanDto,
    filter_model=LoansFilterParams,
    search_fields=("loan_name", "lender_name", "loan_account_number"),
    date_field="loan_start_date",
    display_field="loan_name",
    prepare_create=_prepare,
)


def create_router() -> APIRouter:
    return add_crud_routes(APIRouter(prefix="/loans"), SPEC)
