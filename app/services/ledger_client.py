"""
LedgerClient - Remote, authoritative ledger for scores and reward claims.

The Aptos contract exposes `leaderboard::submit_score`, `leaderboard::claim_reward`
and (optionally) a `leaderboard::get_score` view function. Signing happens in the
relayer behind `ledger_api_url`; this client only submits the entry function
payload and waits for confirmation.

Every failure (timeout, rejected transaction, network error, bad response) is
raised as LedgerError so callers can treat them uniformly.
"""

import logging
from typing import Optional

import httpx
from pydantic import BaseModel, ValidationError

from app.core.logging_config import mask_identity

logger = logging.getLogger(__name__)


class LedgerError(Exception):
    """Base exception for ledger failures."""
    pass


class LedgerUnavailableError(LedgerError):
    """Raised when the ledger cannot be reached (or is not configured)."""
    pass


class LedgerTransactionError(LedgerError):
    """Raised when the ledger rejects or fails to execute a transaction."""
    pass


class LedgerReceipt(BaseModel):
    """Confirmation of an executed ledger transaction."""
    tx_hash: str
    success: bool = True
    vm_status: Optional[str] = None
    version: Optional[str] = None


class LedgerClient:
    """Contract every ledger adapter implements."""

    supports_reads: bool = False

    async def submit_score(self, identity: str, score: int) -> LedgerReceipt:
        raise NotImplementedError

    async def claim_reward(self, identity: str) -> LedgerReceipt:
        raise NotImplementedError

    async def get_score(self, identity: str) -> Optional[int]:
        raise LedgerUnavailableError("This ledger does not expose a read path")

    async def aclose(self) -> None:
        pass


class DisabledLedgerClient(LedgerClient):
    """
    Used when no ledger is configured.

    Every write fails, so the score reconciler always takes the local store path.
    """

    async def submit_score(self, identity: str, score: int) -> LedgerReceipt:
        raise LedgerUnavailableError("Ledger is not configured")

    async def claim_reward(self, identity: str) -> LedgerReceipt:
        raise LedgerUnavailableError("Ledger is not configured")


class AptosLedgerClient(LedgerClient):
    def __init__(
        self,
        base_url: str,
        contract_address: str,
        timeout: float = 15.0,
        read_enabled: bool = False,
        http_client: Optional[httpx.AsyncClient] = None
    ):
        self.base_url = base_url.rstrip("/")
        self.contract_address = contract_address
        self.supports_reads = read_enabled
        self._client = http_client or httpx.AsyncClient(timeout=timeout)

    def _function(self, name: str) -> str:
        return f"{self.contract_address}::leaderboard::{name}"

    async def _request(self, method: str, path: str, **kwargs) -> httpx.Response:
        url = f"{self.base_url}{path}"
        try:
            response = await self._client.request(method, url, **kwargs)
        except httpx.TimeoutException as e:
            raise LedgerUnavailableError(f"Ledger request timed out: {url}") from e
        except httpx.HTTPError as e:
            raise LedgerUnavailableError(f"Ledger request failed: {e}") from e

        if response.status_code >= 500:
            raise LedgerUnavailableError(
                f"Ledger error. Status: {response.status_code}, Response: {response.text}"
            )
        if response.status_code >= 400:
            raise LedgerTransactionError(
                f"Ledger rejected request. Status: {response.status_code}, Response: {response.text}"
            )
        return response

    @staticmethod
    def _json(response: httpx.Response, expected: type):
        """Parse the body, raising LedgerTransactionError if it is not `expected` JSON."""
        try:
            body = response.json()
        except ValueError as e:
            raise LedgerTransactionError(
                f"Ledger returned a non-JSON body. Status: {response.status_code}, Response: {response.text[:200]}"
            ) from e

        if not isinstance(body, expected):
            raise LedgerTransactionError(f"Unexpected ledger response: {body!r}")
        return body

    async def _submit_entry_function(self, sender: str, function: str, arguments: list) -> LedgerReceipt:
        payload = {
            "sender": sender,
            "payload": {
                "type": "entry_function_payload",
                "function": function,
                "type_arguments": [],
                "arguments": arguments,
            },
        }

        response = await self._request("POST", "/transactions", json=payload)
        tx_hash = self._json(response, dict).get("hash")
        if not tx_hash:
            raise LedgerTransactionError("Ledger response did not include a transaction hash")

        # Espera confirmación (fire-and-confirm)
        confirmation = await self._request("GET", f"/transactions/wait_by_hash/{tx_hash}")
        data = self._json(confirmation, dict)

        try:
            receipt = LedgerReceipt(
                tx_hash=tx_hash,
                success=bool(data.get("success", False)),
                vm_status=data.get("vm_status"),
                version=data.get("version"),
            )
        except ValidationError as e:
            raise LedgerTransactionError(f"Unexpected confirmation for {tx_hash}: {data!r}") from e

        if not receipt.success:
            raise LedgerTransactionError(
                f"Transaction {tx_hash} failed: {receipt.vm_status or 'unknown status'}"
            )
        return receipt

    async def submit_score(self, identity: str, score: int) -> LedgerReceipt:
        logger.info(f"⛓️ Submitting score {score} for {mask_identity(identity)}")
        return await self._submit_entry_function(
            sender=identity,
            function=self._function("submit_score"),
            arguments=[str(score), self.contract_address],
        )

    async def claim_reward(self, identity: str) -> LedgerReceipt:
        logger.info(f"⛓️ Claiming reward for {mask_identity(identity)}")
        return await self._submit_entry_function(
            sender=identity,
            function=self._function("claim_reward"),
            arguments=[self.contract_address],
        )

    async def get_score(self, identity: str) -> Optional[int]:
        """Read the stored score from the `get_score` view function (None if absent)."""
        if not self.supports_reads:
            return await super().get_score(identity)

        response = await self._request(
            "POST",
            "/view",
            json={
                "function": self._function("get_score"),
                "type_arguments": [],
                "arguments": [identity, self.contract_address],
            },
        )
        values = self._json(response, list)
        if not values or values[0] is None:
            return None

        try:
            return int(values[0])
        except (TypeError, ValueError) as e:
            raise LedgerTransactionError(f"Unexpected view response: {values!r}") from e

    async def aclose(self) -> None:
        await self._client.aclose()
