"""
Purchase domain models - Immutable dataclasses wrapping Play Developer API results.

The raw payload schema belongs to the Play Developer API. Records keep it
untouched and expose typed accessors for the fields callers commonly merge.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any, ClassVar, Generic, TypeVar

PayloadT = TypeVar("PayloadT", bound=Mapping[str, Any])


class SkuType(str, Enum):
    """Billing catalog item type, selecting the upstream endpoint."""

    ONE_TIME = "inapp"
    SUBSCRIPTION = "subs"


@dataclass(frozen=True)
class PurchaseIdentity:
    """Identifies a single purchase verification request."""

    package_name: str
    product_id: str
    purchase_token: str


def _optional_int(payload: Mapping[str, Any], key: str) -> int | None:
    # Play returns int64 fields as JSON strings
    value = payload.get(key)
    if value is None:
        return None
    return int(value)


@dataclass(frozen=True)
class OneTimeProductPurchase(Generic[PayloadT]):
    """Result of a products.get query."""

    sku_type: ClassVar[SkuType] = SkuType.ONE_TIME

    identity: PurchaseIdentity
    payload: PayloadT

    @property
    def order_id(self) -> str | None:
        return self.payload.get("orderId")

    @property
    def purchase_state(self) -> int | None:
        """0: purchased, 1: canceled, 2: pending."""
        return _optional_int(self.payload, "purchaseState")

    @property
    def purchase_time_millis(self) -> int | None:
        return _optional_int(self.payload, "purchaseTimeMillis")

    def is_valid(self) -> bool:
        """Check if purchase is completed and not canceled."""
        return self.purchase_state == 0

    def is_test_purchase(self) -> bool:
        """Check if this is a test purchase (license tester account)."""
        return _optional_int(self.payload, "purchaseType") == 0

    def needs_acknowledgement(self) -> bool:
        """Check if purchase still needs acknowledgement."""
        return _optional_int(self.payload, "acknowledgementState") in (None, 0)

    def needs_consumption(self) -> bool:
        """Check if purchase still needs consumption (for consumables)."""
        return _optional_int(self.payload, "consumptionState") in (None, 0)


@dataclass(frozen=True)
class SubscriptionPurchase(Generic[PayloadT]):
    """
    Result of a subscriptions.get query.

    trigger_notification_type is set only when the query was caused by a
    Real-Time Developer Notification, so a caller merging this record into
    storage can record what refreshed it.
    """

    sku_type: ClassVar[SkuType] = SkuType.SUBSCRIPTION

    identity: PurchaseIdentity
    payload: PayloadT
    trigger_notification_type: int | str | None = None

    @property
    def order_id(self) -> str | None:
        return self.payload.get("orderId")

    @property
    def start_time_millis(self) -> int | None:
        return _optional_int(self.payload, "startTimeMillis")

    @property
    def expiry_time_millis(self) -> int | None:
        return _optional_int(self.payload, "expiryTimeMillis")

    @property
    def linked_purchase_token(self) -> str | None:
        """Token of the subscription this one replaced (upgrade/downgrade/resubscribe)."""
        return self.payload.get("linkedPurchaseToken")

    def will_renew(self) -> bool:
        return bool(self.payload.get("autoRenewing", False))

    def is_entitlement_active(self, now_millis: int) -> bool:
        """Check if the subscription grants access at the given time."""
        expiry = self.expiry_time_millis
        return expiry is not None and expiry > now_millis

    def is_account_hold(self, now_millis: int) -> bool:
        """Expired but still auto-renewing: Play is retrying the payment."""
        return self.will_renew() and not self.is_entitlement_active(now_millis)

    def is_test_purchase(self) -> bool:
        """Check if this is a test purchase (license tester account)."""
        return _optional_int(self.payload, "purchaseType") == 0

    def is_free_trial(self) -> bool:
        # paymentState: 0 pending, 1 received, 2 free trial, 3 deferred
        return _optional_int(self.payload, "paymentState") == 2


PurchaseRecord = OneTimeProductPurchase[Any] | SubscriptionPurchase[Any]
