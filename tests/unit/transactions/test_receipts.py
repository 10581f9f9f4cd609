from datetime import datetime, timedelta, timezone

import pytest

from modules.transactions.receipts import can_download_receipt, days_since, mask_upi_reference

pytestmark = pytest.mark.unit

NOW = datetime(2026, 3, 15, 10, 30, tzinfo=timezone.utc)


class TestReceiptWindow:
    @pytest.mark.parametrize("days", [0, 1, 45, 90])
    def test_within_window(self, days):
        assert can_download_receipt(NOW - timedelta(days=days), NOW) is True

    @pytest.mark.parametrize("days", [91, 365])
    def test_outside_window(self, days):
        assert can_download_receipt(NOW - timedelta(days=days), NOW) is False

    def test_partial_days_are_floored(self):
        paid = NOW - timedelta(days=90, hours=23)
        assert days_since(paid, NOW) == 90
        assert can_download_receipt(paid, NOW) is True


class TestMaskUpiReference:
    def test_long_reference_shows_last_eight(self):
        assert mask_upi_reference("UPI123456789012") == "****56789012"

    @pytest.mark.parametrize("reference", ["", "ABC", "12345678"])
    def test_short_reference_unchanged(self, reference):
        assert mask_upi_reference(reference) == reference
