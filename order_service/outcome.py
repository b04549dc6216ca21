import enum
from dataclasses import dataclass, field
from typing import List, Optional

from order_service.domain import Order


class OutcomeKind(str, enum.Enum):
    OK = "ok"
    VALIDATION_ERROR = "validation_error"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    SERVICE_UNAVAILABLE = "service_unavailable"
    INTERNAL_ERROR = "internal_error"


@dataclass
class Outcome:
    """Result of a workflow call. The HTTP layer maps ``kind`` to a status code."""

    kind: OutcomeKind
    order: Optional[Order] = None
    message: str = ""
    errors: List[str] = field(default_factory=list)
    product_id: Optional[int] = None
    available: Optional[int] = None
    requested: Optional[int] = None

    @property
    def ok(self) -> bool:
        return self.kind is OutcomeKind.OK

    @classmethod
    def success(cls, order: Optional[Order] = None) -> "Outcome":
        return cls(OutcomeKind.OK, order=order)

    @classmethod
    def invalid(cls, errors: List[str]) -> "Outcome":
        return cls(OutcomeKind.VALIDATION_ERROR, message="; ".join(errors), errors=errors)

    @classmethod
    def not_found(cls, message: str, product_id: Optional[int] = None) -> "Outcome":
        return cls(OutcomeKind.NOT_FOUND, message=message, product_id=product_id)

    @classmethod
    def conflict(cls, product_id: int, name: str, available: int, requested: int) -> "Outcome":
        message = (
            f"Insufficient stock for product '{name}' (id {product_id}): "
            f"available {available}, requested {requested}"
        )
        return cls(
            OutcomeKind.CONFLICT,
            message=message,
            product_id=product_id,
            available=available,
            requested=requested,
        )

    @classmethod
    def unavailable(cls, product_id: int) -> "Outcome":
        return cls(
            OutcomeKind.SERVICE_UNAVAILABLE,
            message=f"Could not fetch product {product_id} from the inventory service",
            product_id=product_id,
        )

    @classmethod
    def internal(cls, message: str) -> "Outcome":
        return cls(OutcomeKind.INTERNAL_ERROR, message=message)
