from __future__ import annotations

from bizsuite.models.loans import Loan
from bizsuite.services.resources.base import ResourceService


class LoanService(ResourceService[Loan]):
    entity_name = "loan"
    path = "/api/loans"
    model = Loan
