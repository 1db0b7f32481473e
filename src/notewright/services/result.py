"""ServiceResult and ServiceError — the contract every operation returns.

The CLI and any embedding application consume this type; exceptions
from the domain layer are translated into a ``ServiceError`` carrying
the error's stable code.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from notewright.domain.errors import NotewrightError


class ServiceError(BaseModel):
    """Structured error payload within a ServiceResult."""

    model_config = {"frozen": True}

    code: str
    message: str
    detail: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_exception(cls, exc: NotewrightError) -> ServiceError:
        return cls(code=exc.code, message=exc.message, detail=dict(exc.detail))


class ServiceResult(BaseModel):
    """Universal return type for service operations.

    Attributes:
        ok: Whether the operation succeeded.
        op: Name of the operation (e.g. ``"insert_template"``).
        data: Operation-specific payload on success.
        warnings: Non-fatal issues encountered during the operation.
        error: Structured error if ``ok`` is False.
    """

    model_config = {"frozen": True}

    ok: bool
    op: str
    data: dict[str, Any] = Field(default_factory=dict)
    warnings: list[str] = Field(default_factory=list)
    error: ServiceError | None = None

    @classmethod
    def failure(cls, op: str, exc: NotewrightError, **kwargs: Any) -> ServiceResult:
        return cls(ok=False, op=op, error=ServiceError.from_exception(exc), **kwargs)
