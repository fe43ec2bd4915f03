"""
Paper pricing error hierarchy.

The calculator itself signals a missing BF price by returning None. These
exceptions exist for callers that want to surface that (or an invalid paper
specification) as a validation error on the user's paper selection.
"""

from typing import Any, Optional, Union

from fastapi import status


class PricingError(Exception):
    """Base exception for paper pricing failures."""

    def __init__(
        self,
        code: str,
        message: str,
        status_code: int = 422,
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.error_code = code
        self.message = message
        self.status_code = status_code
        self.details = details or {}

    def to_dict(self) -> dict:
        return {
            "error": {
                "code": self.error_code,
                "message": self.message,
                "details": self.details,
            }
        }


class RateUnavailableError(PricingError):
    """No base price is configured for the requested BF."""

    def __init__(self, bf: Union[int, float], gsm: Optional[Union[int, float]] = None, shade: Optional[str] = None):
        self.bf = bf
        details: dict[str, Any] = {"bf": bf}
        if gsm is not None:
            details["gsm"] = gsm
        if shade is not None:
            details["shade"] = shade
        super().__init__(
            code="RATE_NOT_AVAILABLE",
            message=f"Rate not available for BF {bf}",
            details=details,
        )


class PaperSpecError(PricingError):
    """Paper specification could not be generated from the given layers."""

    def __init__(self, errors: list[str]):
        self.errors = list(errors)
        reason = "; ".join(self.errors) if self.errors else "Paper specification could not be generated"
        super().__init__(
            code="INVALID_PAPER_SPEC",
            message=f"Invalid paper specification: {reason}",
            status_code=status.HTTP_400_BAD_REQUEST,
            details={"errors": self.errors},
        )
