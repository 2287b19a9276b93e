"""
HTTP-facing exceptions.

Domain errors from the program engine are translated into these at the
router; main.py renders them as {"detail", "error_code"[, "field"]}.
"""
from fastapi import HTTPException, status
from typing import Optional, Dict, Any


class APIException(HTTPException):
    """HTTPException with a machine-readable error code."""

    def __init__(
        self,
        status_code: int,
        detail: str,
        error_code: Optional[str] = None,
        headers: Optional[Dict[str, Any]] = None,
        field: Optional[str] = None,
    ):
        super().__init__(status_code=status_code, detail=detail, headers=headers)
        self.error_code = error_code
        self.field = field

    def to_body(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"detail": self.detail, "error_code": self.error_code}
        if self.field:
            body["field"] = self.field
        return body


class InputError(APIException):
    """Malformed request payload, e.g. a training profile without goals."""

    def __init__(self, detail: str, error_code: str = "INVALID_INPUT", field: Optional[str] = None):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=detail,
            error_code=error_code,
            field=field,
        )


class ServiceConfigurationError(APIException):
    """Program generation is not configured (no Anthropic credentials)."""

    def __init__(self, detail: str = "AI service is not configured"):
        super().__init__(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=detail,
            error_code="SERVICE_NOT_CONFIGURED",
        )
