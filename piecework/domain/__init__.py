"""Domain layer definitions."""

from .state import PayrollState

__all__ = [
    "PayrollState",
]
