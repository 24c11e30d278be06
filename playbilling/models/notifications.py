"""
Real-Time Developer Notification models - Pydantic models for decoded push payloads.

Fields accept both the camelCase wire names and the Python field names.
Decoding the Pub/Sub envelope is the transport's job; these models start
from the already-decoded notification JSON.
"""

from enum import IntEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class NotificationType(IntEnum):
    """Subscription lifecycle events reported by Google Play."""

    SUBSCRIPTION_RECOVERED = 1
    SUBSCRIPTION_RENEWED = 2
    SUBSCRIPTION_CANCELED = 3
    SUBSCRIPTION_PURCHASED = 4
    SUBSCRIPTION_ON_HOLD = 5
    SUBSCRIPTION_IN_GRACE_PERIOD = 6
    SUBSCRIPTION_RESTARTED = 7
    SUBSCRIPTION_PRICE_CHANGE_CONFIRMED = 8
    SUBSCRIPTION_DEFERRED = 9
    SUBSCRIPTION_PAUSED = 10
    SUBSCRIPTION_PAUSE_SCHEDULE_CHANGED = 11
    SUBSCRIPTION_REVOKED = 12
    SUBSCRIPTION_EXPIRED = 13
    SUBSCRIPTION_PENDING_PURCHASE_CANCELED = 20


def notification_type_name(code: int | str | None) -> str:
    """
    Readable label for a notification code.

    All unrecognized codes share the "unknown" label so payload values never
    widen metric cardinality.
    """
    if code is None:
        return "unset"
    try:
        return NotificationType(code).name
    except ValueError:
        return "unknown"


class _NotificationModel(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")


class TestNotification(_NotificationModel):
    """Sent from the Play Console to check the notification pipeline."""

    __test__ = False  # not a pytest test class

    version: str | None = None


class SubscriptionNotification(_NotificationModel):
    """
    Subscription state change.

    notification_type holds the numeric code. Names of NotificationType
    members are converted to their codes; anything unrecognized is kept as sent.
    """

    version: str | None = None
    notification_type: int | str | None = Field(None, alias="notificationType")
    purchase_token: str | None = Field(None, alias="purchaseToken")
    subscription_id: str | None = Field(None, alias="subscriptionId")

    @field_validator("notification_type", mode="before")
    @classmethod
    def _coerce_notification_type(cls, value: Any) -> Any:
        if isinstance(value, str):
            text = value.strip()
            if text in NotificationType.__members__:
                return NotificationType[text].value
            if text.isdigit():
                return int(text)
        return value


class OneTimeProductNotification(_NotificationModel):
    """One-time product state change (never re-queried by the resolver)."""

    version: str | None = None
    notification_type: int | None = Field(None, alias="notificationType")
    purchase_token: str | None = Field(None, alias="purchaseToken")
    sku: str | None = None


class DeveloperNotification(_NotificationModel):
    """A single decoded Real-Time Developer Notification."""

    version: str | None = None
    package_name: str | None = Field(None, alias="packageName")
    event_time_millis: int | None = Field(None, alias="eventTimeMillis")
    test_notification: TestNotification | None = Field(None, alias="testNotification")
    subscription_notification: SubscriptionNotification | None = Field(
        None, alias="subscriptionNotification"
    )
    one_time_product_notification: OneTimeProductNotification | None = Field(
        None, alias="oneTimeProductNotification"
    )

    @field_validator("test_notification", mode="before")
    @classmethod
    def _accept_test_marker(cls, value: Any) -> Any:
        """The test marker is opaque: any truthy value counts as present."""
        if value is None or isinstance(value, (dict, TestNotification)):
            return value
        return TestNotification() if value else None
