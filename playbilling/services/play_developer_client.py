"""
Google Play Developer API client.

The resolver depends only on the PlayDeveloperClient protocol; the
googleapiclient-backed implementation lives here alongside it.
"""

import asyncio
from collections.abc import Mapping
from typing import Any, Protocol

from google.oauth2 import service_account
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError
from structlog import get_logger

logger = get_logger(__name__)

ANDROID_PUBLISHER_SCOPE = "https://www.googleapis.com/auth/androidpublisher"


class UpstreamError(Exception):
    """Failure reported by the Play Developer API, before normalization."""

    def __init__(self, status: int | None, message: str) -> None:
        self.status = status
        self.message = message
        super().__init__(f"Play Developer API error ({status}): {message}")

    @classmethod
    def from_http_error(cls, exc: HttpError) -> "UpstreamError":
        """Build from a googleapiclient HttpError, keeping status and reason."""
        status = int(exc.resp.status) if exc.resp is not None else None
        reason = getattr(exc, "reason", None)
        if not reason:
            reason = exc.content.decode("utf-8") if exc.content else str(exc)
        return cls(status=status, message=reason)


class PlayDeveloperClient(Protocol):
    """
    Authenticated access to the purchases endpoints of the Play Developer API.

    Both calls are single-shot: implementations must not retry, and must raise
    UpstreamError on failure.
    """

    async def get_one_time_product(
        self, package_name: str, product_id: str, token: str
    ) -> Mapping[str, Any]:
        """Fetch a one-time product purchase (purchases.products.get)."""
        ...

    async def get_subscription(
        self, package_name: str, subscription_id: str, token: str
    ) -> Mapping[str, Any]:
        """Fetch a subscription purchase (purchases.subscriptions.get)."""
        ...


class GooglePlayDeveloperClient:
    """PlayDeveloperClient backed by the androidpublisher v3 discovery client."""

    def __init__(self, service: Any) -> None:
        """
        Args:
            service: androidpublisher v3 resource from googleapiclient.discovery.build
        """
        self.service = service

    @classmethod
    def from_service_account(
        cls, service_account_json: str | dict[str, str]
    ) -> "GooglePlayDeveloperClient":
        """
        Build a client from service account credentials.

        Args:
            service_account_json: Path to service account JSON or dict with credentials
        """
        if isinstance(service_account_json, str):
            credentials = service_account.Credentials.from_service_account_file(  # type: ignore[no-untyped-call]
                service_account_json,
                scopes=[ANDROID_PUBLISHER_SCOPE],
            )
        else:
            credentials = service_account.Credentials.from_service_account_info(  # type: ignore[no-untyped-call]
                service_account_json,
                scopes=[ANDROID_PUBLISHER_SCOPE],
            )

        service = build("androidpublisher", "v3", credentials=credentials, cache_discovery=False)
        logger.info("play_developer_client_initialized")
        return cls(service)

    async def get_one_time_product(
        self, package_name: str, product_id: str, token: str
    ) -> Mapping[str, Any]:
        request = (
            self.service.purchases()
            .products()
            .get(packageName=package_name, productId=product_id, token=token)
        )
        return await self._execute(request)

    async def get_subscription(
        self, package_name: str, subscription_id: str, token: str
    ) -> Mapping[str, Any]:
        request = (
            self.service.purchases()
            .subscriptions()
            .get(packageName=package_name, subscriptionId=subscription_id, token=token)
        )
        return await self._execute(request)

    async def _execute(self, request: Any) -> Mapping[str, Any]:
        # execute() blocks on HTTP; keep it off the event loop
        try:
            result: Mapping[str, Any] = await asyncio.to_thread(request.execute)
        except HttpError as exc:
            raise UpstreamError.from_http_error(exc) from exc
        return result
