"""Request validation against pydantic schemas.

Handlers validate explicitly (instead of declaring body models on the route)
so a bad request always gets the error envelope and never reaches an
upstream call.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Generic, Literal, Optional, Type, TypeVar

from fastapi import Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from runeswap.errors import ValidationError

from .responses import error

SchemaT = TypeVar("SchemaT", bound=BaseModel)


@dataclass(slots=True)
class ValidationResult(Generic[SchemaT]):
    success: bool
    data: Optional[SchemaT] = None
    error_response: Optional[JSONResponse] = None


def flatten_errors(exc: PydanticValidationError) -> dict[str, list[str]]:
    """``{field: [messages]}``, model-level errors go under ``_errors``."""

    fields: dict[str, list[str]] = {}
    for item in exc.errors():
        loc = ".".join(str(part) for part in item.get("loc", ())) or "_errors"
        fields.setdefault(loc, []).append(item.get("msg", "Invalid value"))
    return fields


def _rejected(exc: ValidationError) -> ValidationResult:
    return ValidationResult(success=False, error_response=error(exc.message, exc.details, exc.status))


async def _read_source(request: Request, source: str) -> Any:
    if source == "query":
        return dict(request.query_params)
    raw = await request.body()
    if not raw:
        return {}
    return json.loads(raw)


async def validate_request(
    request: Request,
    schema: Type[SchemaT],
    source: Literal["body", "query"] = "body",
) -> ValidationResult[SchemaT]:
    """Parse and coerce the request against ``schema``, never raises."""

    try:
        payload = await _read_source(request, source)
    except (ValueError, UnicodeDecodeError):
        return _rejected(ValidationError("Invalid request", "The request body could not be parsed as JSON"))

    try:
        data = schema.model_validate(payload)
    except PydanticValidationError as exc:
        return _rejected(ValidationError(details=json.dumps(flatten_errors(exc))))
    return ValidationResult(success=True, data=data)


__all__ = ["ValidationResult", "flatten_errors", "validate_request"]
