import asyncio
import json

import pytest

from plexi.config import ChainConfig
from plexi.onchain.client import VaultChainClient

TEST_KEY = "ed25519-priv-0x" + "a" * 64
VAULT = "0x98dfcb742ea92c051230fbc1defac9b9c8d298670d544c0e1a23b9620b3a27e2"
TX_HASH = "0x" + "ab" * 32


class DummyRestClient:
    """Stands in for aptos_sdk.async_client.RestClient; method names and
    parameters mirror the real client."""

    def __init__(
        self,
        views=None,
        resources=None,
        fail=False,
        tx_success=True,
        hang=False,
    ):
        self.views = views if views is not None else {}
        self.resources = resources if resources is not None else []
        self.fail = fail
        self.tx_success = tx_success
        self.hang = hang
        self.view_calls = []
        self.submitted = []
        self.closed = False

    async def view(self, function, type_arguments, arguments, ledger_version=None):
        self.view_calls.append((function, type_arguments, arguments))
        if self.fail:
            raise RuntimeError("connection refused")
        name = function.split("::")[-1]
        if name not in self.views:
            raise RuntimeError(f"FUNCTION_NOT_FOUND: {function}")
        return json.dumps(self.views[name]).encode()

    async def create_bcs_signed_transaction(self, sender, payload, sequence_number=None):
        if self.fail:
            raise RuntimeError("connection refused")
        self.submitted.append(payload.value)
        return payload

    async def submit_bcs_transaction(self, signed_transaction):
        return TX_HASH

    async def transaction_pending(self, txn_hash):
        if self.hang:
            await asyncio.sleep(3600)
        return False

    async def transaction_by_hash(self, txn_hash):
        return {
            "hash": txn_hash,
            "success": self.tx_success,
            "vm_status": "Executed successfully" if self.tx_success else "Move abort: E_INSUFFICIENT_SHARES",
            "gas_used": "42",
            "events": [{"type": f"{VAULT}::vault::DepositEvent", "data": {"amount": "1000"}}],
            "changes": [],
        }

    async def account_resources(self, account_address, ledger_version=None):
        if self.fail:
            raise RuntimeError("connection refused")
        return self.resources

    async def info(self):
        return {"chain_id": 2, "ledger_version": "123456"}

    async def close(self):
        self.closed = True


def _build_client(rest=None, **overrides) -> VaultChainClient:
    values = {"private_key": TEST_KEY, "vault_address": VAULT}
    values.update(overrides)
    return VaultChainClient(ChainConfig(**values), rest_client=rest or DummyRestClient())


@pytest.fixture()
def make_rest():
    return DummyRestClient


@pytest.fixture()
def make_client():
    return _build_client


@pytest.fixture()
def rest():
    return DummyRestClient(
        views={
            "is_initialized": [True],
            "total_assets": ["1000"],
            "total_shares": ["1000"],
            "get_asset_token": ["USDC"],
            "get_user_shares": ["250"],
            "get_strategy_count": ["3"],
            "get_reward_tokens": [["0x1::aptos_coin::AptosCoin", "USDC"]],
            "get_strategy_metadata": [{"name": "delta-neutral", "risk_level": "2"}],
        }
    )


@pytest.fixture()
def client(rest):
    return _build_client(rest)
