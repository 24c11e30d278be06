"""
Tests for exception classes.

Covers all exception types and their string representations.
"""

import pytest

from playbilling.exceptions import (
    InvalidSkuTypeError,
    PlayBillingError,
    PurchaseQueryError,
    PurchaseQueryErrorKind,
)


class TestPlayBillingError:
    """Tests for base PlayBillingError."""

    def test_is_exception(self):
        """PlayBillingError is a subclass of Exception."""
        assert issubclass(PlayBillingError, Exception)

    def test_can_be_raised(self):
        """PlayBillingError can be raised and caught."""
        with pytest.raises(PlayBillingError):
            raise PlayBillingError("test error")


class TestPurchaseQueryError:
    """Tests for PurchaseQueryError."""

    def test_attributes(self):
        """Exception has kind and message attributes."""
        exc = PurchaseQueryError(PurchaseQueryErrorKind.INVALID_TOKEN, "Not found")
        assert exc.kind is PurchaseQueryErrorKind.INVALID_TOKEN
        assert exc.message == "Not found"

    def test_message_format(self):
        """String form leads with the kind."""
        exc = PurchaseQueryError(PurchaseQueryErrorKind.OTHER_ERROR, "Backend error")
        assert str(exc) == "OTHER_ERROR: Backend error"

    def test_kind_values(self):
        """Kinds serialize to stable names."""
        assert PurchaseQueryErrorKind.INVALID_TOKEN.value == "INVALID_TOKEN"
        assert PurchaseQueryErrorKind.OTHER_ERROR.value == "OTHER_ERROR"

    def test_is_billing_error(self):
        """PurchaseQueryError is a PlayBillingError."""
        exc = PurchaseQueryError(PurchaseQueryErrorKind.OTHER_ERROR, "x")
        assert isinstance(exc, PlayBillingError)


class TestInvalidSkuTypeError:
    """Tests for InvalidSkuTypeError."""

    def test_attributes(self):
        """Exception keeps the rejected value and a fixed kind."""
        exc = InvalidSkuTypeError("consumable")
        assert exc.sku_type == "consumable"
        assert exc.kind == "INVALID_ARGUMENT"

    def test_message_format(self):
        """Message names the rejected value."""
        exc = InvalidSkuTypeError("consumable")
        assert str(exc) == "Invalid skuType: 'consumable'"

    def test_is_value_error(self):
        """Caller contract violations are ValueErrors as well as PlayBillingErrors."""
        exc = InvalidSkuTypeError(None)
        assert isinstance(exc, ValueError)
        assert isinstance(exc, PlayBillingError)
        assert not isinstance(exc, PurchaseQueryError)
