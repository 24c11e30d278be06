"""
Purchase Resolver - resolves the current state of Google Play purchases.

Queries the Play Developer API for one-time products and subscriptions,
normalizes upstream failures into PurchaseQueryError, and re-resolves
subscriptions when a Real-Time Developer Notification reports a change.

Persisting or merging the returned records is the caller's job.
"""

import time
from collections.abc import Awaitable, Callable, Mapping
from typing import Any

import structlog
from googleapiclient.errors import HttpError
from opentelemetry.trace import Tracer
from prometheus_client import CollectorRegistry

from playbilling.config import ConfigurationError, Settings, get_settings
from playbilling.exceptions import (
    InvalidSkuTypeError,
    PurchaseQueryError,
    PurchaseQueryErrorKind,
)
from playbilling.models.notifications import (
    DeveloperNotification,
    NotificationType,
    notification_type_name,
)
from playbilling.models.purchases import (
    OneTimeProductPurchase,
    PurchaseIdentity,
    PurchaseRecord,
    SkuType,
    SubscriptionPurchase,
)
from playbilling.observability.logging import get_logger, log_context
from playbilling.observability.metrics import ResolverMetrics
from playbilling.observability.metrics import metrics as default_metrics
from playbilling.observability.tracing import add_span_attributes, get_tracer, set_span_error
from playbilling.services.play_developer_client import (
    GooglePlayDeveloperClient,
    PlayDeveloperClient,
    UpstreamError,
)

module_logger = get_logger(__name__)


def _status_code(error: BaseException) -> int | None:
    """Numeric status carried by a raw client error as `status` or `code`, if any."""
    for attr in ("status", "code"):
        value = getattr(error, attr, None)
        if isinstance(value, bool):
            continue
        if isinstance(value, int):
            return value
        if isinstance(value, str) and value.isdigit():
            return int(value)
    return None


def convert_upstream_error(
    error: BaseException,
    logger: structlog.stdlib.BoundLogger | None = None,
) -> PurchaseQueryError:
    """
    Map an upstream failure onto the resolver's error taxonomy.

    404 means the token is unknown to Play. Anything else at this boundary is
    almost always an authorization or configuration problem, so it is logged
    as such.
    """
    if isinstance(error, HttpError):
        error = UpstreamError.from_http_error(error)
    if isinstance(error, UpstreamError):
        status, message = error.status, error.message
    else:
        status, message = _status_code(error), str(error)

    if status == 404:
        return PurchaseQueryError(PurchaseQueryErrorKind.INVALID_TOKEN, message)

    (logger or module_logger).error(
        "unexpected_play_developer_api_error",
        status=status,
        error=message,
        hint="check that the service account is correct and has access to the app",
    )
    return PurchaseQueryError(PurchaseQueryErrorKind.OTHER_ERROR, message)


class PurchaseResolver:
    """
    Resolves purchases against the Play Developer API.

    Stateless between calls: no caching, no deduplication, no retries.
    """

    def __init__(
        self,
        client: PlayDeveloperClient,
        *,
        logger: structlog.stdlib.BoundLogger | None = None,
        metrics: ResolverMetrics | None = None,
        tracer: Tracer | None = None,
    ) -> None:
        """
        Args:
            client: Authenticated Play Developer API client (never closed here)
            logger: Structured logger; defaults to the module logger
            metrics: Prometheus metrics; defaults to the process-wide instance
            tracer: OpenTelemetry tracer; defaults to the global provider's tracer
        """
        self.client = client
        self.logger = logger or module_logger
        self.metrics = metrics or default_metrics
        self.tracer = tracer or get_tracer(__name__)

    async def query_one_time_product_purchase(
        self, package_name: str, product_id: str, purchase_token: str
    ) -> OneTimeProductPurchase[Mapping[str, Any]]:
        """
        Query the latest state of a one-time product purchase.

        Raises:
            PurchaseQueryError: If the Play Developer API call fails
        """
        identity = PurchaseIdentity(package_name, product_id, purchase_token)
        payload = await self._call_upstream(
            "play.products.get",
            SkuType.ONE_TIME,
            identity,
            lambda: self.client.get_one_time_product(package_name, product_id, purchase_token),
        )
        return OneTimeProductPurchase(identity=identity, payload=payload)

    async def query_subscription_purchase(
        self, package_name: str, product_id: str, purchase_token: str
    ) -> SubscriptionPurchase[Mapping[str, Any]]:
        """
        Query the latest state of a subscription purchase.

        Raises:
            PurchaseQueryError: If the Play Developer API call fails
        """
        return await self._query_subscription_purchase_with_trigger(
            package_name, product_id, purchase_token
        )

    async def _query_subscription_purchase_with_trigger(
        self,
        package_name: str,
        product_id: str,
        purchase_token: str,
        trigger_notification_type: int | str | None = None,
    ) -> SubscriptionPurchase[Mapping[str, Any]]:
        # Every subscription lookup goes through here, user-initiated or not
        identity = PurchaseIdentity(package_name, product_id, purchase_token)
        payload = await self._call_upstream(
            "play.subscriptions.get",
            SkuType.SUBSCRIPTION,
            identity,
            lambda: self.client.get_subscription(package_name, product_id, purchase_token),
            trigger_notification_type=trigger_notification_type,
        )
        return SubscriptionPurchase(
            identity=identity,
            payload=payload,
            trigger_notification_type=trigger_notification_type,
        )

    async def query_purchase(
        self,
        package_name: str,
        product_id: str,
        purchase_token: str,
        sku_type: SkuType | str,
    ) -> PurchaseRecord:
        """
        Query a purchase of either type, dispatching on sku_type.

        Raises:
            InvalidSkuTypeError: If sku_type is neither ONE_TIME nor SUBSCRIPTION
            PurchaseQueryError: If the Play Developer API call fails
        """
        if sku_type == SkuType.ONE_TIME:
            return await self.query_one_time_product_purchase(
                package_name, product_id, purchase_token
            )
        elif sku_type == SkuType.SUBSCRIPTION:
            return await self.query_subscription_purchase(
                package_name, product_id, purchase_token
            )
        else:
            self.metrics.record_error("INVALID_ARGUMENT", "query_purchase")
            raise InvalidSkuTypeError(sku_type)

    async def process_developer_notification(
        self, package_name: str, notification: DeveloperNotification
    ) -> SubscriptionPurchase[Mapping[str, Any]] | None:
        """
        React to a decoded Real-Time Developer Notification.

        Returns the freshly resolved subscription, or None when the
        notification does not warrant a query.

        Raises:
            PurchaseQueryError: If the re-query fails
        """
        if notification.test_notification is not None:
            self.logger.info(
                "test_notification_received",
                package_name=package_name,
                version=notification.test_notification.version,
            )
            self.metrics.record_notification("test", "ignored_test")
            return None

        subscription_notification = notification.subscription_notification
        notification_type = (
            subscription_notification.notification_type if subscription_notification else None
        )
        type_name = notification_type_name(notification_type)

        # New purchases are verified through the client purchase flow, which
        # sends the same token; querying here would race that write.
        if notification_type == NotificationType.SUBSCRIPTION_PURCHASED:
            self.logger.info(
                "subscription_purchased_notification_skipped", package_name=package_name
            )
            self.metrics.record_notification(type_name, "ignored_purchased")
            return None

        subscription_id = ""
        purchase_token = ""
        if subscription_notification is not None:
            subscription_id = subscription_notification.subscription_id or ""
            purchase_token = subscription_notification.purchase_token or ""
        if not subscription_id or not purchase_token:
            # TODO: decide whether incomplete notifications should skip the query instead
            self.logger.warning(
                "subscription_notification_incomplete",
                package_name=package_name,
                notification_type=type_name,
                has_subscription_id=bool(subscription_id),
                has_purchase_token=bool(purchase_token),
            )

        self.logger.info(
            "subscription_notification_received",
            package_name=package_name,
            subscription_id=subscription_id,
            notification_type=type_name,
            notification_code=notification_type,
        )
        self.metrics.record_notification(type_name, "requeried")
        return await self._query_subscription_purchase_with_trigger(
            package_name, subscription_id, purchase_token, notification_type
        )

    async def _call_upstream(
        self,
        span_name: str,
        sku_type: SkuType,
        identity: PurchaseIdentity,
        call: Callable[[], Awaitable[Mapping[str, Any]]],
        trigger_notification_type: int | str | None = None,
    ) -> Mapping[str, Any]:
        """Run one upstream call, normalizing its failure and recording telemetry."""
        start = time.perf_counter()
        with self.tracer.start_as_current_span(
            span_name, record_exception=False, set_status_on_exception=False
        ) as span:
            add_span_attributes(
                span,
                package_name=identity.package_name,
                product_id=identity.product_id,
                sku_type=sku_type.value,
                trigger_notification_type=trigger_notification_type,
            )
            try:
                payload = await call()
            except Exception as exc:
                with log_context(
                    package_name=identity.package_name,
                    product_id=identity.product_id,
                    sku_type=sku_type.value,
                ):
                    error = convert_upstream_error(exc, self.logger)
                set_span_error(span, error)
                self.metrics.record_query(
                    sku_type.value, error.kind.value, time.perf_counter() - start
                )
                self.metrics.record_error(error.kind.value, span_name)
                raise error from exc

        self.metrics.record_query(sku_type.value, "success", time.perf_counter() - start)
        self.logger.info(
            "purchase_query_succeeded",
            package_name=identity.package_name,
            product_id=identity.product_id,
            sku_type=sku_type.value,
        )
        return payload


def create_purchase_resolver(settings: Settings | None = None) -> PurchaseResolver:
    """
    Build a resolver backed by the real Play Developer API.

    Raises:
        ConfigurationError: If no service account is configured
    """
    settings = settings or get_settings()
    credentials = settings.service_account_credentials
    if credentials is None:
        raise ConfigurationError("GOOGLE_PLAY_SERVICE_ACCOUNT is required to query purchases")

    client = GooglePlayDeveloperClient.from_service_account(credentials)
    # Disabled metrics still count, but into a registry nothing exports
    metrics = None if settings.metrics_enabled else ResolverMetrics(registry=CollectorRegistry())
    module_logger.info(
        "purchase_resolver_created",
        package_name=settings.android_package_name or None,
        metrics_enabled=settings.metrics_enabled,
        tracing_enabled=settings.tracing_enabled,
    )
    return PurchaseResolver(client, metrics=metrics)
