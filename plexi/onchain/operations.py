"""Named vault entry and view functions on top of VaultChainClient."""
from __future__ import annotations

import logging
from typing import Any, Optional

from aptos_sdk.transactions import TransactionArgument

from plexi.onchain.client import (
    TransactionResult,
    VaultChainClient,
    address_arg,
    parse_int,
    string_arg,
    u64_arg,
)

logger = logging.getLogger(__name__)

BPS_DENOMINATOR = 10_000
HEDGE_DIRECTIONS = ("long", "short")


def _require_amount(name: str, value: int) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ValueError(f"{name} must be a non-negative integer")
    return value


def _require_allocation(hedge_bps: int, farm_bps: int) -> None:
    for name, value in (("hedge_allocation", hedge_bps), ("farm_allocation", farm_bps)):
        _require_amount(name, value)
        if value > BPS_DENOMINATOR:
            raise ValueError(f"{name} must be at most {BPS_DENOMINATOR} bps")
    if hedge_bps + farm_bps > BPS_DENOMINATOR:
        raise ValueError("Allocations exceed 100%")


class VaultOperations:
    def __init__(self, client: VaultChainClient) -> None:
        self.client = client

    def _signer(self, address: Optional[str]) -> TransactionArgument:
        return address_arg(address or self.client.address)

    async def _call(self, entry_point: str, args: list) -> TransactionResult:
        logger.info("Calling vault::%s", entry_point)
        return await self.client.submit_transaction(entry_point, args)

    async def init_vault(
        self, asset_token: str = "USDC", rebalance_cooldown: int = 3600
    ) -> TransactionResult:
        _require_amount("rebalance_cooldown", rebalance_cooldown)
        return await self._call(
            "init_vault", [string_arg(asset_token), u64_arg(rebalance_cooldown)]
        )

    async def deposit(self, amount: int, receiver: Optional[str] = None) -> TransactionResult:
        _require_amount("amount", amount)
        return await self._call("deposit", [u64_arg(amount), self._signer(receiver)])

    async def withdraw(
        self, amount: int, receiver: Optional[str] = None, owner: Optional[str] = None
    ) -> TransactionResult:
        _require_amount("amount", amount)
        return await self._call(
            "withdraw", [u64_arg(amount), self._signer(receiver), self._signer(owner)]
        )

    async def mint(self, shares: int, receiver: Optional[str] = None) -> TransactionResult:
        _require_amount("shares", shares)
        return await self._call("mint", [u64_arg(shares), self._signer(receiver)])

    async def redeem(
        self, shares: int, receiver: Optional[str] = None, owner: Optional[str] = None
    ) -> TransactionResult:
        _require_amount("shares", shares)
        return await self._call(
            "redeem", [u64_arg(shares), self._signer(receiver), self._signer(owner)]
        )

    async def register_strategy(
        self, strategy_name: str, risk_level: int, creator: Optional[str] = None
    ) -> TransactionResult:
        if not strategy_name:
            raise ValueError("strategy_name is required")
        _require_amount("risk_level", risk_level)
        return await self._call(
            "register_strategy_metadata",
            [string_arg(strategy_name), u64_arg(risk_level), self._signer(creator)],
        )

    async def rebalance(self, hedge_allocation: int, farm_allocation: int) -> TransactionResult:
        _require_allocation(hedge_allocation, farm_allocation)
        return await self._call("rebalance", [u64_arg(hedge_allocation), u64_arg(farm_allocation)])

    async def trigger_rebalance(
        self, hedge_allocation: int, farm_allocation: int
    ) -> TransactionResult:
        _require_allocation(hedge_allocation, farm_allocation)
        return await self._call(
            "trigger_rebalance", [u64_arg(hedge_allocation), u64_arg(farm_allocation)]
        )

    async def hedge_with_hyperliquid(
        self, strategy_id: int, amount: int, direction: str
    ) -> TransactionResult:
        _require_amount("strategy_id", strategy_id)
        _require_amount("amount", amount)
        if direction not in HEDGE_DIRECTIONS:
            raise ValueError(f"direction must be one of {', '.join(HEDGE_DIRECTIONS)}")
        return await self._call(
            "hedge_with_hyperliquid",
            [u64_arg(strategy_id), u64_arg(amount), string_arg(direction)],
        )

    async def farm_with_tapp(self, strategy_id: int, amount: int) -> TransactionResult:
        _require_amount("strategy_id", strategy_id)
        _require_amount("amount", amount)
        return await self._call("farm_with_tapp", [u64_arg(strategy_id), u64_arg(amount)])

    async def harvest_yield(self, strategy_id: int) -> TransactionResult:
        _require_amount("strategy_id", strategy_id)
        return await self._call("harvest_yield", [u64_arg(strategy_id)])

    async def add_reward_token(self, reward_token: str) -> TransactionResult:
        if not reward_token:
            raise ValueError("reward_token is required")
        return await self._call("add_reward_token", [string_arg(reward_token)])

    async def update_reward_per_share(self, reward_token: str, amount: int) -> TransactionResult:
        if not reward_token:
            raise ValueError("reward_token is required")
        _require_amount("amount", amount)
        return await self._call(
            "update_reward_per_share", [string_arg(reward_token), u64_arg(amount)]
        )

    async def route_order_to_clob(self, order_data: str) -> TransactionResult:
        if not order_data:
            raise ValueError("order_data is required")
        return await self._call("route_order_to_clob", [string_arg(order_data)])

    async def get_strategy_metadata(self, strategy_id: int) -> Any:
        _require_amount("strategy_id", strategy_id)
        vault = self.client.get_config().vault_address
        result = await self.client.call_view("get_strategy_metadata", [vault, strategy_id])
        return result[0] if result else None

    async def get_strategy_count(self) -> int:
        vault = self.client.get_config().vault_address
        return await self.client.view_value("get_strategy_count", [vault], parse_int)

    async def get_reward_tokens(self) -> list[str]:
        vault = self.client.get_config().vault_address
        result = await self.client.call_view("get_reward_tokens", [vault])
        if not result:
            return []
        return [str(token) for token in result[0]]

    # The deployed module has no view for these conversions, so they are
    # derived from the current vault state.
    async def convert_to_shares(self, assets: int) -> int:
        _require_amount("assets", assets)
        state = await self.client.get_vault_state()
        if state.total_shares == 0 or state.total_assets == 0:
            return assets
        return (assets * state.total_shares) // state.total_assets

    async def convert_to_assets(self, shares: int) -> int:
        _require_amount("shares", shares)
        state = await self.client.get_vault_state()
        if state.total_shares == 0:
            return 0
        return (shares * state.total_assets) // state.total_shares
