"""
Pytest Configuration and Centralized Fixtures.

Provides reusable mocks and fixtures for testing:
- Play Developer API client doubles
- Raw upstream payloads
- Resolver wired with isolated metrics and a mock logger
"""

from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest
from prometheus_client import CollectorRegistry

from playbilling.observability.metrics import ResolverMetrics
from playbilling.services.play_developer_client import PlayDeveloperClient
from playbilling.services.purchase_resolver import PurchaseResolver

PACKAGE_NAME = "com.example.app"
SUBSCRIPTION_ID = "monthly_sub"
PRODUCT_ID = "gems_100"
PURCHASE_TOKEN = "tok123"


# ============================================================================
# Raw Payload Fixtures
# ============================================================================


@pytest.fixture
def subscription_payload() -> dict[str, Any]:
    """A subscriptions.get response for an active, auto-renewing subscription."""
    return {
        "kind": "androidpublisher#subscriptionPurchase",
        "status": "active",
        "startTimeMillis": "1700000000000",
        "expiryTimeMillis": "1900000000000",
        "autoRenewing": True,
        "paymentState": 1,
        "orderId": "GPA.3300-1111-2222-33333",
        "acknowledgementState": 1,
    }


@pytest.fixture
def product_payload() -> dict[str, Any]:
    """A products.get response for a purchased, unconsumed product."""
    return {
        "kind": "androidpublisher#productPurchase",
        "purchaseTimeMillis": "1700000000000",
        "purchaseState": 0,
        "consumptionState": 0,
        "acknowledgementState": 0,
        "orderId": "GPA.1234-5678-9012-34567",
    }


# ============================================================================
# Client and Resolver Fixtures
# ============================================================================


@pytest.fixture
def play_client(
    subscription_payload: dict[str, Any], product_payload: dict[str, Any]
) -> AsyncMock:
    """Mock Play Developer API client returning successful payloads."""
    client = AsyncMock(spec=PlayDeveloperClient)
    client.get_one_time_product = AsyncMock(return_value=product_payload)
    client.get_subscription = AsyncMock(return_value=subscription_payload)
    return client


@pytest.fixture
def metrics_registry() -> CollectorRegistry:
    """Isolated Prometheus registry so counters start at zero."""
    return CollectorRegistry()


@pytest.fixture
def resolver_metrics(metrics_registry: CollectorRegistry) -> ResolverMetrics:
    """Resolver metrics bound to the isolated registry."""
    return ResolverMetrics(registry=metrics_registry)


@pytest.fixture
def mock_logger() -> MagicMock:
    """Stand-in for the structured logger."""
    return MagicMock()


@pytest.fixture
def resolver(
    play_client: AsyncMock, resolver_metrics: ResolverMetrics, mock_logger: MagicMock
) -> PurchaseResolver:
    """Resolver under test with all collaborators injected."""
    return PurchaseResolver(play_client, logger=mock_logger, metrics=resolver_metrics)
