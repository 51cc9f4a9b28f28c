"""Tagged result values returned at the service boundary.

Every command on an application service returns either ``Ok(value)`` or
``Err(kind, message, details)``; callers branch on the variant instead of
catching exceptions::

    result = service.create_order(dto)
    if isinstance(result, Err):
        ...
    order = result.value
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any, Dict, Generic, TypeVar, Union

T = TypeVar("T")


class ErrorKind(StrEnum):
    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    DUPLICATE = "duplicate"
    BUSINESS_RULE = "business_rule"
    INSUFFICIENT_STOCK = "insufficient_stock"


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T

    @property
    def is_ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Err:
    kind: ErrorKind
    message: str
    details: Dict[str, Any] = field(default_factory=dict)

    @property
    def is_ok(self) -> bool:
        return False


Result = Union[Ok[T], Err]
