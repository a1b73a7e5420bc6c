"""Error models shared by the API layer."""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class ErrorCode(str, Enum):
    """Machine-readable error codes returned in the error envelope."""

    VALIDATION_ERROR = "VALIDATION_ERROR"
    NOT_FOUND = "NOT_FOUND"
    UPSTREAM_ERROR = "UPSTREAM_ERROR"
    API_ERROR = "API_ERROR"


class Violation(BaseModel):
    """A single invalid request field."""

    field: str = Field(..., description="Dotted path of the field", examples=["city"])
    message: str = Field(..., description="What is wrong", examples=["must not be blank"])


class ErrorDetail(BaseModel):
    code: ErrorCode
    message: str
    user_message: str
    violations: list[Violation] = Field(default_factory=list)


class ErrorResponse(BaseModel):
    """Envelope returned for every 4xx/5xx response."""

    success: bool = False
    error: ErrorDetail


class AppError(Exception):
    """Application error that maps directly onto an HTTP response."""

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        user_message: Optional[str] = None,
        status_code: int = 500,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.user_message = user_message or "Something went wrong. Please try again."
        self.status_code = status_code

    def to_response(self) -> ErrorResponse:
        return ErrorResponse(
            error=ErrorDetail(
                code=self.code,
                message=self.message,
                user_message=self.user_message,
            )
        )
