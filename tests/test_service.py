"""Tests for GatewayService — proves the facade maps intents and errors correctly."""

import pytest
from decimal import Decimal

from paygate.config import GatewayConfig
from paygate.persistence.event_log import EventKind
from paygate.service import GatewayService
from paygate.validation import today_utc


@pytest.fixture
def service() -> GatewayService:
    return GatewayService()


def _prepared(service: GatewayService) -> tuple[int, int]:
    """Settings {1, 2, 10}, one shop with commission 5, one payment of 100."""
    service.update_settings(1, 2, 10)
    shop_id = service.register_shop("Coffee Corner", 5).data["shop_id"]
    payment_id = service.accept_payment(shop_id, 100).data["payment_id"]
    return shop_id, payment_id


class TestSettingsIntent:
    def test_echoes_values(self, service: GatewayService) -> None:
        result = service.update_settings(1, 2, 10)
        assert result.success
        assert result.data == {"commission_a": "1", "commission_b": "2", "block_sum": "10"}

    def test_invalid_values(self, service: GatewayService) -> None:
        result = service.update_settings(1, 0, 10)
        assert not result.success
        assert result.error_kind == "validation"
        assert result.errors

    def test_initial_values_from_config(self) -> None:
        service = GatewayService(GatewayConfig(block_sum=Decimal("20")))
        shop_id = service.register_shop("Coffee Corner", 5).data["shop_id"]
        payment_id = service.accept_payment(shop_id, 100).data["payment_id"]
        assert Decimal(service.get_payment(payment_id)["blocked_amount"]) == Decimal("20")


class TestShopAndPaymentIntents:
    def test_register_returns_sequential_ids(self, service: GatewayService) -> None:
        assert service.register_shop("A", 5).data == {"shop_id": 1}
        assert service.register_shop("B", 5).data == {"shop_id": 2}

    def test_register_blank_name(self, service: GatewayService) -> None:
        result = service.register_shop("  ", 5)
        assert not result.success
        assert result.error_kind == "validation"

    def test_accept_unknown_shop(self, service: GatewayService) -> None:
        result = service.accept_payment(7, 100)
        assert not result.success
        assert result.error_kind == "not_found"

    def test_accept_negative_amount(self, service: GatewayService) -> None:
        service.register_shop("A", 5)
        result = service.accept_payment(1, -5)
        assert not result.success
        assert result.error_kind == "validation"

    def test_accept_records_blocked_amount(self, service: GatewayService) -> None:
        _, payment_id = _prepared(service)
        payment = service.get_payment(payment_id)
        assert Decimal(payment["blocked_amount"]) == Decimal("10")
        assert payment["status"] == "accepted"


class TestTransitionIntents:
    def test_process_returns_full_snapshot(self, service: GatewayService) -> None:
        shop_id, payment_id = _prepared(service)
        other = service.accept_payment(shop_id, 50).data["payment_id"]
        result = service.process_payments([payment_id])
        assert result.success
        assert result.data["message"] == "Payments processed"
        assert [p["id"] for p in result.data["payments"]] == [payment_id, other]
        assert result.data["payments"][0]["status"] == "processed"
        assert result.data["payments"][1]["status"] == "accepted"

    def test_outcomes_report_skips(self, service: GatewayService) -> None:
        _, payment_id = _prepared(service)
        result = service.complete_payments([payment_id, 99])
        assert result.data["message"] == "Payments completed"
        assert result.data["outcomes"] == [
            {"id": payment_id, "previous_status": "accepted", "new_status": None, "applied": False},
            {"id": 99, "previous_status": None, "new_status": None, "applied": False},
        ]

    def test_malformed_ids(self, service: GatewayService) -> None:
        _, payment_id = _prepared(service)
        result = service.process_payments([payment_id, "x"])
        assert not result.success
        assert result.error_kind == "validation"
        assert service.get_payment(payment_id)["status"] == "accepted"

    def test_lenient_config_accepts_malformed_ids(self) -> None:
        service = GatewayService(GatewayConfig(strict_payment_ids=False))
        _, payment_id = _prepared(service)
        result = service.process_payments([payment_id, "x"])
        assert result.success
        assert service.get_payment(payment_id)["status"] == "processed"


class TestWithdrawIntent:
    def test_end_to_end(self, service: GatewayService) -> None:
        shop_id, payment_id = _prepared(service)
        service.process_payments([payment_id])
        service.complete_payments([payment_id])
        result = service.withdraw(shop_id)
        assert result.success
        assert Decimal(result.data["total_payment"]) == Decimal("92")
        assert len(result.data["payments"]) == 1
        assert result.data["payments"][0]["id"] == payment_id
        assert Decimal(result.data["payments"][0]["amount"]) == Decimal("92")
        assert result.data["last_payout"] == today_utc().isoformat()
        assert service.get_payment(payment_id)["status"] == "withdrawn"

    def test_nothing_to_withdraw(self, service: GatewayService) -> None:
        shop_id, _ = _prepared(service)
        result = service.withdraw(shop_id)
        assert result.success
        assert result.data == {"total_payment": "0", "payments": [], "last_payout": None}

    def test_second_withdrawal_same_day(self, service: GatewayService) -> None:
        shop_id, payment_id = _prepared(service)
        service.process_payments([payment_id])
        service.complete_payments([payment_id])
        assert service.withdraw(shop_id).success
        result = service.withdraw(shop_id)
        assert not result.success
        assert result.error_kind == "cooldown"

    def test_unknown_shop(self, service: GatewayService) -> None:
        result = service.withdraw(5)
        assert result.error_kind == "not_found"

    def test_invalid_shop_id(self, service: GatewayService) -> None:
        result = service.withdraw("abc")
        assert result.error_kind == "validation"


class TestAuditAndStatus:
    def test_events_recorded_for_mutations(self, service: GatewayService) -> None:
        shop_id, payment_id = _prepared(service)
        service.process_payments([payment_id])
        service.complete_payments([payment_id])
        service.withdraw(shop_id)
        kinds = [e.event_kind for e in service.events()]
        assert kinds == [
            EventKind.SETTINGS_UPDATED,
            EventKind.SHOP_REGISTERED,
            EventKind.PAYMENT_ACCEPTED,
            EventKind.PAYMENTS_PROCESSED,
            EventKind.PAYMENTS_COMPLETED,
            EventKind.WITHDRAWAL_COMPLETED,
        ]
        assert all(e.verify() for e in service.events())

    def test_failures_and_noops_not_recorded(self, service: GatewayService) -> None:
        service.register_shop("", 5)
        service.process_payments([1])
        service.withdraw(1)
        assert service.events() == []

    def test_status_counts(self, service: GatewayService) -> None:
        shop_id, payment_id = _prepared(service)
        service.accept_payment(shop_id, 20)
        service.process_payments([payment_id])
        status = service.status()
        assert status["shops"] == 1
        assert status["payments"]["total"] == 2
        assert status["payments"]["by_status"] == {
            "accepted": 1,
            "processed": 1,
            "completed": 0,
            "withdrawn": 0,
        }
        assert status["settings"]["block_sum"] == "10"
        assert status["strict_payment_ids"] is True

    def test_services_do_not_share_state(self) -> None:
        first = GatewayService()
        second = GatewayService()
        first.register_shop("A", 5)
        assert second.register_shop("B", 5).data["shop_id"] == 1
        assert second.get_shop(1)["name"] == "B"


class TestQueries:
    def test_get_shop_snapshot(self, service: GatewayService) -> None:
        shop_id, payment_id = _prepared(service)
        shop = service.get_shop(shop_id)
        assert shop == {
            "id": shop_id,
            "name": "Coffee Corner",
            "commission_c": "5",
            "payments": [payment_id],
            "last_payout": None,
        }

    def test_snapshots_are_detached(self, service: GatewayService) -> None:
        shop_id, payment_id = _prepared(service)
        service.get_shop(shop_id)["payments"].append(99)
        service.get_payment(payment_id)["status"] = "withdrawn"
        assert service.get_shop(shop_id)["payments"] == [payment_id]
        assert service.get_payment(payment_id)["status"] == "accepted"

    def test_missing_records(self, service: GatewayService) -> None:
        assert service.get_shop(1) is None
        assert service.get_payment(1) is None

    def test_oversized_amount_rejected(self, service: GatewayService) -> None:
        service.update_settings(1, 2, 10)
        shop_id = service.register_shop("Huge", 5).data["shop_id"]
        result = service.accept_payment(shop_id, "1e999999")
        assert not result.success
        assert result.error_kind == "validation"
        assert service.list_payments() == []
