"""Application services."""

from .payroll import PayrollService, get_payroll_service, reset_payroll_state

__all__ = [
    "PayrollService",
    "get_payroll_service",
    "reset_payroll_state",
]
