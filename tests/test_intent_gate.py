"""Tests for the single-flight payment intent gate."""

import asyncio
import logging

import pytest

from carebook.config import PaymentConfig
from carebook.logging_context import NO_BOOKING, current_booking_id
from carebook.payments import PaymentIntentGate, PaymentStatus
from carebook.tools import MockPaymentProvider


def make_gate(provider: MockPaymentProvider, max_attempts: int = 3) -> PaymentIntentGate:
    return PaymentIntentGate(
        provider, PaymentConfig(max_attempts=max_attempts, currency="GBP", method="stripe")
    )


class TestSuccess:
    @pytest.mark.asyncio
    async def test_returns_checkout_url(self, provider):
        gate = make_gate(provider)
        outcome = await gate.ensure_checkout("BK-1", 50.0)
        assert outcome.succeeded is True
        assert outcome.checkout_url.startswith("https://checkout.example.com/pay/BK-1")
        assert gate.state.status == PaymentStatus.SUCCEEDED
        assert gate.in_flight is False

    @pytest.mark.asyncio
    async def test_provider_receives_currency_and_method(self):
        provider = MockPaymentProvider()
        gate = PaymentIntentGate(provider, PaymentConfig(max_attempts=3, currency="EUR", method="card"))
        await gate.ensure_checkout("BK-1", 50.0)
        call = provider.calls[0]
        assert (call.booking_id, call.amount, call.currency, call.method) == ("BK-1", 50.0, "EUR", "card")

    @pytest.mark.asyncio
    async def test_success_is_cached(self, provider):
        gate = make_gate(provider)
        first = await gate.ensure_checkout("BK-1", 50.0)
        second = await gate.ensure_checkout("BK-1", 50.0)
        assert second.checkout_url == first.checkout_url
        assert provider.call_count == 1

    @pytest.mark.asyncio
    async def test_gate_log_records_carry_booking_id(self, provider, caplog):
        with caplog.at_level(logging.INFO, logger="carebook.payments.intent_gate"):
            await make_gate(provider).ensure_checkout("BK-77", 50.0)
        records = [r for r in caplog.records if r.name == "carebook.payments.intent_gate"]
        assert records
        assert all(r.booking_id == "BK-77" for r in records)
        assert current_booking_id() == NO_BOOKING


class TestSingleFlight:
    @pytest.mark.asyncio
    async def test_concurrent_callers_share_one_request(self):
        provider = MockPaymentProvider(delay=0.05)
        gate = make_gate(provider)
        outcomes = await asyncio.gather(*(gate.ensure_checkout("BK-1", 50.0) for _ in range(5)))
        assert provider.call_count == 1
        assert len({o.checkout_url for o in outcomes}) == 1
        assert all(o.succeeded for o in outcomes)

    @pytest.mark.asyncio
    async def test_concurrent_callers_share_one_failure(self):
        provider = MockPaymentProvider(fail_times=1, delay=0.05)
        gate = make_gate(provider)
        outcomes = await asyncio.gather(*(gate.ensure_checkout("BK-1", 50.0) for _ in range(3)))
        assert provider.call_count == 1
        assert all(o.reason == "provider_error" for o in outcomes)
        assert gate.state.retry_count == 1

    @pytest.mark.asyncio
    async def test_in_flight_while_waiting(self):
        provider = MockPaymentProvider(delay=0.05)
        gate = make_gate(provider)
        task = asyncio.create_task(gate.ensure_checkout("BK-1", 50.0))
        await asyncio.sleep(0.01)
        assert gate.in_flight is True
        assert gate.state.status == PaymentStatus.PENDING
        await task
        assert gate.in_flight is False


class TestRetries:
    @pytest.mark.asyncio
    async def test_failure_is_retryable(self):
        provider = MockPaymentProvider(fail_times=1)
        gate = make_gate(provider)
        first = await gate.ensure_checkout("BK-1", 50.0)
        assert first.succeeded is False
        assert first.retryable is True
        assert first.reason == "provider_error"
        assert first.message == "Card network unavailable"

        second = await gate.ensure_checkout("BK-1", 50.0)
        assert second.succeeded is True
        assert provider.call_count == 2

    @pytest.mark.asyncio
    async def test_third_failure_exhausts_retries(self):
        provider = MockPaymentProvider(fail_times=10)
        gate = make_gate(provider)
        outcomes = [await gate.ensure_checkout("BK-1", 50.0) for _ in range(3)]
        assert [o.retryable for o in outcomes] == [True, True, False]
        assert outcomes[-1].reason == "retries_exhausted"
        assert "refresh the page" in outcomes[-1].message
        assert gate.state.retry_count == 3

    @pytest.mark.asyncio
    async def test_no_provider_call_after_exhaustion(self):
        provider = MockPaymentProvider(fail_times=10)
        gate = make_gate(provider)
        for _ in range(3):
            await gate.ensure_checkout("BK-1", 50.0)
        outcome = await gate.ensure_checkout("BK-1", 50.0)
        assert outcome.reason == "retries_exhausted"
        assert provider.call_count == 3

    @pytest.mark.asyncio
    async def test_new_booking_starts_new_lineage(self):
        provider = MockPaymentProvider(fail_times=3)
        gate = make_gate(provider)
        for _ in range(3):
            await gate.ensure_checkout("BK-1", 50.0)
        outcome = await gate.ensure_checkout("BK-2", 50.0)
        assert outcome.succeeded is True
        assert gate.state.booking_id == "BK-2"
        assert gate.state.retry_count == 0

    @pytest.mark.asyncio
    async def test_switching_back_keeps_exhausted_cap(self):
        provider = MockPaymentProvider(fail_times=3)
        gate = make_gate(provider)
        for _ in range(3):
            await gate.ensure_checkout("BK-1", 50.0)
        await gate.ensure_checkout("BK-2", 50.0)
        outcome = await gate.ensure_checkout("BK-1", 50.0)
        assert outcome.reason == "retries_exhausted"
        assert provider.call_count == 4
        assert gate.state_for("BK-1").retry_count == 3

    @pytest.mark.asyncio
    async def test_single_attempt_cap(self):
        provider = MockPaymentProvider(fail_times=1)
        gate = make_gate(provider, max_attempts=1)
        outcome = await gate.ensure_checkout("BK-1", 50.0)
        assert outcome.reason == "retries_exhausted"
        assert outcome.retryable is False

    @pytest.mark.asyncio
    async def test_raised_errors_count_as_failures(self):
        provider = MockPaymentProvider(fail_times=1, raise_errors=True, error="connection reset")
        gate = make_gate(provider)
        outcome = await gate.ensure_checkout("BK-1", 50.0)
        assert outcome.reason == "provider_error"
        assert outcome.message == "connection reset"
        assert gate.state.last_error == "connection reset"


class TestParentFacingMessages:
    @pytest.mark.asyncio
    async def test_configuration_details_are_hidden(self):
        provider = MockPaymentProvider(fail_times=1, error="STRIPE_SECRET_KEY not configured")
        outcome = await make_gate(provider).ensure_checkout("BK-1", 50.0)
        assert "SECRET" not in outcome.message
        assert "temporarily unavailable" in outcome.message

    @pytest.mark.asyncio
    async def test_missing_error_text(self):
        provider = MockPaymentProvider(fail_times=1, error="")
        outcome = await make_gate(provider).ensure_checkout("BK-1", 50.0)
        assert outcome.reason == "provider_error"
        assert outcome.message == "Failed to create payment session"


class TestLineage:
    @pytest.mark.asyncio
    async def test_non_positive_amount_makes_no_call(self, provider):
        gate = make_gate(provider)
        outcome = await gate.ensure_checkout("BK-1", 0.0)
        assert outcome.reason == "invalid_amount"
        assert provider.call_count == 0
        assert gate.state is None

    @pytest.mark.asyncio
    async def test_amount_change_supersedes_in_flight_request(self):
        provider = MockPaymentProvider(delay=0.05)
        gate = make_gate(provider)
        stale = asyncio.create_task(gate.ensure_checkout("BK-1", 50.0))
        await asyncio.sleep(0.01)
        fresh = await gate.ensure_checkout("BK-1", 60.0)
        old = await stale

        assert old.succeeded is False
        assert old.reason == "superseded"
        assert old.retryable is False
        assert fresh.succeeded is True
        assert provider.call_count == 2
        assert gate.state.amount == 60.0
        assert gate.state.checkout_url == fresh.checkout_url

    @pytest.mark.asyncio
    async def test_amount_change_after_success_creates_new_intent(self, provider):
        gate = make_gate(provider)
        first = await gate.ensure_checkout("BK-1", 50.0)
        second = await gate.ensure_checkout("BK-1", 75.0)
        assert second.succeeded is True
        assert second.checkout_url != first.checkout_url
        assert provider.call_count == 2

    @pytest.mark.asyncio
    async def test_explicit_reset(self, provider):
        gate = make_gate(provider)
        await gate.ensure_checkout("BK-1", 50.0)
        gate.reset("BK-1", 50.0)
        assert gate.state.status == PaymentStatus.UNINITIATED
        await gate.ensure_checkout("BK-1", 50.0)
        assert provider.call_count == 2

    @pytest.mark.asyncio
    async def test_switching_back_reuses_existing_intent(self, provider):
        gate = make_gate(provider)
        first = await gate.ensure_checkout("BK-1", 50.0)
        await gate.ensure_checkout("BK-2", 50.0)
        again = await gate.ensure_checkout("BK-1", 50.0)
        assert [c.booking_id for c in provider.calls] == ["BK-1", "BK-2"]
        assert again.checkout_url == first.checkout_url
        assert gate.state.booking_id == "BK-1"

    @pytest.mark.asyncio
    async def test_other_booking_does_not_supersede_in_flight_request(self):
        provider = MockPaymentProvider(delay=0.05)
        gate = make_gate(provider)
        pending = asyncio.create_task(gate.ensure_checkout("BK-1", 50.0))
        await asyncio.sleep(0.01)
        other = await gate.ensure_checkout("BK-2", 50.0)
        first = await pending
        assert first.succeeded is True
        assert other.succeeded is True
        assert gate.state_for("BK-1").status == PaymentStatus.SUCCEEDED
        assert provider.call_count == 2
