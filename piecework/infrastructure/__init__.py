"""Infrastructure layer exports."""

from .repository import InMemoryPayrollRepository, PayrollRepository

__all__ = [
    "InMemoryPayrollRepository",
    "PayrollRepository",
]
