"""Domain layer for hsarecon: the HSA eligibility and payment reconciliation engine."""

from hsarecon.domain.allocation import allocate
from hsarecon.domain.eligibility import is_date_eligible
from hsarecon.domain.reimbursement import classify
from hsarecon.domain.status import status_of
from hsarecon.domain.vault import project_value, summarize
from hsarecon.domain.reconciliation import ReconciliationService

__all__ = [
    "allocate",
    "is_date_eligible",
    "classify",
    "status_of",
    "project_value",
    "summarize",
    "ReconciliationService",
]
