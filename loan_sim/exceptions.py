"""Exceptions raised by the loan simulator."""

from typing import Any, Dict, Optional


class LoanSimError(Exception):
    """Base exception for all loan simulator errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} - {self.details}"
        return self.message


class DomainError(LoanSimError, ValueError):
    """Raised when a rate falls outside the domain of a conversion formula."""

    def __init__(self, message: str, rate: Any = None):
        details = {}
        if rate is not None:
            details["rate"] = str(rate)
        super().__init__(message, details)
