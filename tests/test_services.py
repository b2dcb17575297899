"""Tests for the accounts, transactions and onboarding services."""

import asyncio
import json
from datetime import datetime, timezone
from decimal import Decimal

import pytest

from moneyapp.models.auth import ONBOARDING_STEPS, OnboardingCompletion
from moneyapp.services.accounts import AccountsService
from moneyapp.services.api import ApiError, ApiErrorKind
from moneyapp.services.onboarding import OnboardingService
from moneyapp.services.transactions import TransactionsService

from tests.conftest import account_payload, transaction_payload


@pytest.fixture
def accounts(api_client, token_manager) -> AccountsService:
    return AccountsService(api_client, token_manager)


@pytest.fixture
def transactions(api_client, token_manager) -> TransactionsService:
    return TransactionsService(api_client, token_manager)


@pytest.fixture
def onboarding(api_client, token_manager) -> OnboardingService:
    return OnboardingService(api_client, token_manager)


class TestAccountsService:
    """Tests for AccountsService."""

    def test_list_accounts(self, accounts, backend):
        """Test wire accounts become AccountSummary values."""
        backend.add("GET", "/api/accounts/", json={
            "accounts": [account_payload(1, 10.25, "Checking"), account_payload(2, None, "Savings")],
        })

        result = asyncio.run(accounts.list_accounts())

        assert [a.name for a in result] == ["Checking", "Savings"]
        assert result[0].id == "1"
        assert result[0].balance.amount == Decimal("10.25")
        assert result[1].balance.amount == Decimal("0")

    def test_create_link_token(self, accounts, backend):
        """Test the link token is returned as-is."""
        backend.add("POST", "/api/accounts/link/token", json={"link_token": "link-sandbox-1"})

        response = asyncio.run(accounts.create_link_token())

        assert response.link_token == "link-sandbox-1"

    def test_exchange_public_token_body(self, accounts, backend):
        """Test the exchange body omits unknown institution fields."""
        backend.add("POST", "/api/accounts/link/exchange", json={"success": True, "accounts_linked": 2})

        response = asyncio.run(accounts.exchange_public_token("public-1"))

        assert response.accounts_linked == 2
        assert json.loads(backend.requests[0].content) == {"public_token": "public-1"}

    def test_sync_and_status(self, accounts, backend):
        """Test sync and sync status decode their bodies."""
        backend.add("POST", "/api/accounts/sync", json={
            "success": True,
            "synced_accounts": [{"account_id": 1, "status": "ok"}],
        })
        backend.add("GET", "/api/accounts/sync/status", json={"is_syncing": True})

        async def run():
            return await accounts.sync_accounts(), await accounts.get_sync_status()

        synced, status = asyncio.run(run())

        assert synced.synced_accounts[0].status == "ok"
        assert status.is_syncing is True
        assert backend.calls("POST", "/api/accounts/sync")[0].content == b""

    def test_401_ends_session(self, accounts, backend, token_manager):
        """Test authenticated account endpoints clear the session on 401."""
        backend.add("GET", "/api/accounts/", status=401)

        async def run():
            await token_manager.save_tokens("stale")
            with pytest.raises(ApiError):
                await accounts.list_accounts()
            return await token_manager.is_authenticated()

        assert asyncio.run(run()) is False


class TestTransactionsService:
    """Tests for TransactionsService."""

    def test_list_transactions(self, transactions, backend):
        """Test wire transactions become Transaction values."""
        when = datetime(2025, 8, 1, tzinfo=timezone.utc)
        backend.add("GET", "/api/transactions/", json={
            "transactions": [transaction_payload(9, -4.5, when, name="Bakery")],
            "total": 1,
        })

        [tx] = asyncio.run(transactions.list_transactions())

        assert tx.id == "9"
        assert tx.description == "Bakery"
        assert tx.amount.amount == Decimal("-4.5")
        assert tx.account_id == "1"
        assert tx.category == "FOOD_AND_DRINK"

    def test_recent_transactions_limit(self, transactions, backend):
        """Test the limit trims the feed."""
        when = datetime(2025, 8, 1, tzinfo=timezone.utc)
        backend.add("GET", "/api/transactions/recent", json={
            "transactions": [transaction_payload(i, -1.0, when) for i in range(4)],
        })

        result = asyncio.run(transactions.get_recent_transactions(limit=3))

        assert len(result) == 3

    def test_negative_limit_rejected(self, transactions, backend):
        """Test a negative limit fails before any request."""
        with pytest.raises(ValueError):
            asyncio.run(transactions.get_recent_transactions(limit=-1))
        assert backend.requests == []

    def test_spending_summary_sends_days(self, transactions, backend):
        """Test the period is sent as a query parameter."""
        backend.add("GET", "/api/transactions/summary", json={
            "period_days": 7,
            "total_spending": 120.5,
            "by_category": [{"category": "FOOD_AND_DRINK", "amount": 80}],
        })

        summary = asyncio.run(transactions.get_spending_summary(days=7))

        assert backend.requests[0].url.params["days"] == "7"
        assert summary.total_spending == Decimal("120.5")
        assert summary.by_category[0].category == "FOOD_AND_DRINK"

    @pytest.mark.parametrize("days", [0, -3])
    def test_spending_summary_rejects_bad_period(self, transactions, backend, days):
        """Test non-positive periods are rejected locally."""
        with pytest.raises(ValueError):
            asyncio.run(transactions.get_spending_summary(days=days))
        assert backend.requests == []

    def test_categories(self, transactions, backend):
        """Test the category catalogue decodes."""
        backend.add("GET", "/api/transactions/categories", json={"categories": ["FOOD_AND_DRINK", "TRAVEL"]})

        response = asyncio.run(transactions.get_categories())

        assert response.categories == ["FOOD_AND_DRINK", "TRAVEL"]

    def test_server_error_propagates(self, transactions, backend):
        """Test backend failures surface as ApiError."""
        backend.add("GET", "/api/transactions/", status=502)

        with pytest.raises(ApiError) as exc_info:
            asyncio.run(transactions.list_transactions())

        assert exc_info.value.kind == ApiErrorKind.SERVER


class TestOnboardingService:
    """Tests for OnboardingService."""

    def test_update_device_token(self, onboarding, backend):
        """Test the device token is posted in snake_case."""
        backend.add("POST", "/api/auth/device-token", json={"message": "saved", "success": True})

        response = asyncio.run(onboarding.update_device_token("apns-123"))

        assert response.success is True
        assert json.loads(backend.requests[0].content) == {"device_token": "apns-123"}

    def test_complete_onboarding(self, onboarding, backend):
        """Test the completion record is sent with ISO dates."""
        backend.add("POST", "/api/user/onboarding/complete", json={"message": "done", "success": True})
        completion = OnboardingCompletion(
            user_id=42,
            completed_steps=["welcome", "connect_accounts"],
            completed_at=datetime(2025, 8, 15, 9, 30, tzinfo=timezone.utc),
        )

        asyncio.run(onboarding.complete_onboarding(completion))

        assert json.loads(backend.requests[0].content) == {
            "user_id": 42,
            "completed_steps": ["welcome", "connect_accounts"],
            "completed_at": "2025-08-15T09:30:00Z",
        }

    def test_steps_marks_completed(self, onboarding):
        """Test steps keep their order and reflect completion."""
        steps = onboarding.steps(completed=["welcome", "notifications"])

        assert [s.id for s in steps] == [s.id for s in ONBOARDING_STEPS]
        assert {s.id for s in steps if s.is_completed} == {"welcome", "notifications"}

    def test_steps_do_not_mutate_catalogue(self, onboarding):
        """Test the shared step catalogue is never modified."""
        onboarding.steps(completed=["welcome"])

        assert not any(step.is_completed for step in ONBOARDING_STEPS)
