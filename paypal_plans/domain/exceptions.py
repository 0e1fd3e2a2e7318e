"""Domain-specific exceptions"""

from typing import Any, Dict, List, Optional


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class ValidationFailedError(DomainException):
    """Caller input did not pass schema validation"""

    pass


class GatewayError(DomainException):
    """PayPal API rejected the request"""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        name: Optional[str] = None,
        details: Optional[List[Dict[str, Any]]] = None,
        debug_id: Optional[str] = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.name = name
        self.details = details or []
        self.debug_id = debug_id

    @property
    def detail_message(self) -> str:
        """Human readable detail string, empty when PayPal sent none"""
        issues = [
            f"{d['field']}: {d['issue']}" if d.get("field") else str(d.get("issue", ""))
            for d in self.details
            if d.get("issue")
        ]
        return "; ".join(issues)


class GatewayUnavailableError(GatewayError):
    """PayPal API timed out or could not be reached"""

    pass


class SaleNotFoundError(DomainException):
    """Subscription has no completed sale in the searched window"""

    pass
