"""
Accounts Service

Linked bank accounts: listing, the bank-link handshake (link token,
public-token exchange) and background sync.
"""

from typing import Optional

from moneyapp.models.finance import (
    AccountListResponse,
    AccountSummary,
    LinkTokenResponse,
    PublicTokenExchangeRequest,
    PublicTokenExchangeResponse,
    SyncAccountsResponse,
    SyncStatusResponse,
)
from moneyapp.services.api import AccountEndpoints
from moneyapp.services.base import DomainService


class AccountsService(DomainService):
    """Operations on ``/api/accounts/*``."""

    async def list_accounts(self) -> list[AccountSummary]:
        response: AccountListResponse = await self._request(
            AccountEndpoints.LIST, AccountListResponse
        )
        return response.to_domain()

    async def create_link_token(self) -> LinkTokenResponse:
        """Start the bank-linking flow."""
        return await self._request(AccountEndpoints.LINK_TOKEN, LinkTokenResponse)

    async def exchange_public_token(
        self,
        public_token: str,
        institution_id: Optional[str] = None,
        institution_name: Optional[str] = None,
    ) -> PublicTokenExchangeResponse:
        """
        Finish the bank-linking flow.

        Args:
            public_token: Token returned by the linking UI
            institution_id: Institution identifier, when known
            institution_name: Institution display name, when known
        """
        request = PublicTokenExchangeRequest(
            public_token=public_token,
            institution_id=institution_id,
            institution_name=institution_name,
        )
        response: PublicTokenExchangeResponse = await self._request(
            AccountEndpoints.LINK_EXCHANGE, PublicTokenExchangeResponse, body=request
        )
        self._activity.log_info(
            "accounts_linked",
            category="Accounts",
            accounts_linked=response.accounts_linked,
            institution_id=institution_id,
        )
        return response

    async def sync_accounts(self) -> SyncAccountsResponse:
        return await self._request(AccountEndpoints.SYNC, SyncAccountsResponse)

    async def get_sync_status(self) -> SyncStatusResponse:
        return await self._request(AccountEndpoints.SYNC_STATUS, SyncStatusResponse)
