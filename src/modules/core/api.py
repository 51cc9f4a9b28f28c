"""HTTP translation of service results and exceptions.

Every error leaving the API has the same envelope::

    {"type": "client_error" | "validation_error",
     "errors": [{"code": ..., "detail": ..., "attr": ..., "meta": {...}}]}
"""

from __future__ import annotations

from typing import Any, Dict, Iterator, Optional, Type

import structlog
from pydantic import BaseModel as PydanticModel
from pydantic import ValidationError as PydanticValidationError
from rest_framework import serializers, status
from rest_framework.exceptions import ValidationError
from rest_framework.response import Response
from rest_framework.settings import api_settings
from rest_framework.views import exception_handler

from modules.core.exceptions import DomainError
from modules.core.results import Err, ErrorKind, Result

logger = structlog.get_logger(__name__)

HTTP_STATUS_BY_KIND = {
    ErrorKind.VALIDATION: status.HTTP_400_BAD_REQUEST,
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.DUPLICATE: status.HTTP_409_CONFLICT,
    ErrorKind.BUSINESS_RULE: status.HTTP_400_BAD_REQUEST,
    ErrorKind.INSUFFICIENT_STOCK: status.HTTP_422_UNPROCESSABLE_ENTITY,
}


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------


def error_response(err: Err) -> Response:
    error: Dict[str, Any] = {"code": str(err.kind), "detail": err.message}
    if err.details:
        error["meta"] = err.details
    error_type = "validation_error" if err.kind == ErrorKind.VALIDATION else "client_error"
    return Response(
        {"type": error_type, "errors": [error]},
        status=HTTP_STATUS_BY_KIND[err.kind],
    )


def result_response(
    result: Result[Any],
    serializer_class: Optional[Type[serializers.BaseSerializer]] = None,
    success_status: int = status.HTTP_200_OK,
) -> Response:
    """Render ``Ok`` through *serializer_class* or ``Err`` as an error envelope.

    Pydantic output DTOs are dumped directly; ``Ok(None)`` yields an empty body.
    """
    if isinstance(result, Err):
        return error_response(result)

    value = result.value
    if serializer_class is not None:
        return Response(serializer_class(value).data, status=success_status)
    if isinstance(value, PydanticModel):
        return Response(value.model_dump(mode="json"), status=success_status)
    return Response(status=success_status)


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


def _flatten_errors(data: Any, attr: Optional[str] = None) -> Iterator[Dict[str, Any]]:
    if isinstance(data, dict):
        for key, value in data.items():
            if key == api_settings.NON_FIELD_ERRORS_KEY:
                name = attr
            else:
                name = str(key) if attr is None else f"{attr}.{key}"
            yield from _flatten_errors(value, name)
    elif isinstance(data, list):
        for index, item in enumerate(data):
            if isinstance(item, (dict, list)):
                name = str(index) if attr is None else f"{attr}.{index}"
                yield from _flatten_errors(item, name)
            else:
                yield from _flatten_errors(item, attr)
    else:
        yield {
            "code": getattr(data, "code", "invalid"),
            "detail": str(data),
            "attr": attr,
        }


def _pydantic_errors(exc: PydanticValidationError) -> list[Dict[str, Any]]:
    return [
        {
            "code": error["type"],
            "detail": error["msg"],
            "attr": ".".join(str(part) for part in error["loc"]) or None,
        }
        for error in exc.errors()
    ]


def standard_exception_handler(exc: Exception, context: Dict[str, Any]) -> Optional[Response]:
    """DRF ``EXCEPTION_HANDLER`` producing the standard error envelope.

    Returns ``None`` for exceptions DRF does not handle so they propagate
    as server errors.
    """
    if isinstance(exc, DomainError):
        return error_response(exc.to_result())

    if isinstance(exc, PydanticValidationError):
        return Response(
            {"type": "validation_error", "errors": _pydantic_errors(exc)},
            status=status.HTTP_400_BAD_REQUEST,
        )

    response = exception_handler(exc, context)
    if response is None:
        return None

    if isinstance(exc, ValidationError):
        errors = list(_flatten_errors(response.data))
        error_type = "validation_error"
    else:
        detail = response.data.get("detail", "") if isinstance(response.data, dict) else response.data
        errors = [{"code": getattr(detail, "code", "error"), "detail": str(detail)}]
        error_type = "client_error"

    logger.info(
        "api.request_rejected",
        status_code=response.status_code,
        error_type=error_type,
    )
    response.data = {"type": error_type, "errors": errors}
    return response
