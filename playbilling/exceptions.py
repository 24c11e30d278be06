"""
Exception Classes - Strongly typed exception hierarchy.

NO DICTIONARIES - All exceptions have typed attributes.
"""

from enum import Enum
from typing import ClassVar


class PurchaseQueryErrorKind(str, Enum):
    """Normalized categories of upstream purchase query failures."""

    INVALID_TOKEN = "INVALID_TOKEN"
    OTHER_ERROR = "OTHER_ERROR"


class PlayBillingError(Exception):
    """Base exception for all purchase resolver errors."""

    pass


class PurchaseQueryError(PlayBillingError):
    """Raised when the Play Developer API rejects a purchase query."""

    def __init__(self, kind: PurchaseQueryErrorKind, message: str) -> None:
        self.kind = kind
        self.message = message
        super().__init__(f"{kind.value}: {message}")

    @property
    def is_invalid_token(self) -> bool:
        """True when the token does not correspond to a known purchase."""
        return self.kind is PurchaseQueryErrorKind.INVALID_TOKEN


class InvalidSkuTypeError(PlayBillingError, ValueError):
    """Raised when a caller passes a SKU type the resolver cannot dispatch."""

    kind: ClassVar[str] = "INVALID_ARGUMENT"

    def __init__(self, sku_type: object) -> None:
        self.sku_type = sku_type
        self.message = f"Invalid skuType: {sku_type!r}"
        super().__init__(self.message)
