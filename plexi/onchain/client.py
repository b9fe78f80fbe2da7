"""Aptos client for the vault Move module: transactions, view calls and queries."""
from __future__ import annotations

import asyncio
import json
import logging
import re
from dataclasses import dataclass, field
from typing import Any, Callable, Optional

from aptos_sdk.account import Account
from aptos_sdk.account_address import AccountAddress
from aptos_sdk.async_client import ClientConfig, RestClient
from aptos_sdk.bcs import Serializer
from aptos_sdk.transactions import EntryFunction, TransactionArgument, TransactionPayload
from pydantic import ValidationError

from plexi.config import ChainConfig
from plexi.onchain.errors import ConfigurationError, TransactionError, ViewCallError

logger = logging.getLogger(__name__)

PRIVATE_KEY_PREFIX = "ed25519-priv-"
VAULT_MODULE = "vault"
APTOS_COIN_STORE = "0x1::coin::CoinStore<0x1::aptos_coin::AptosCoin>"
OCTAS_PER_APT = 10**8
TX_POLL_INTERVAL_SECS = 0.5

ADDRESS_RE = re.compile(r"^0x[0-9a-fA-F]{1,64}$")
IDENTIFIER_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")
HEX_CHARS = set("0123456789abcdefABCDEF")


@dataclass
class VaultState:
    total_assets: int
    total_shares: int
    asset_token: str
    is_initialized: bool

    @property
    def share_price(self) -> float:
        if self.total_shares == 0:
            return 0.0
        return self.total_assets / self.total_shares

    def to_dict(self) -> dict:
        return {
            "totalAssets": self.total_assets,
            "totalShares": self.total_shares,
            "assetToken": self.asset_token,
            "isInitialized": self.is_initialized,
        }


@dataclass
class TransactionResult:
    success: bool
    tx_hash: str
    vm_status: Optional[str] = None
    gas_used: int = 0
    events: list[dict] = field(default_factory=list)
    changes: list[dict] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "success": self.success,
            "tx_hash": self.tx_hash,
            "vm_status": self.vm_status,
            "gas_used": self.gas_used,
            "events": self.events,
            "changes": self.changes,
        }


def normalize_address(address: str) -> str:
    """Return the long ``0x``-prefixed form of an Aptos address."""
    if not isinstance(address, str) or not ADDRESS_RE.match(address.strip()):
        raise ValueError(f"Invalid address: {address}")
    return "0x" + address.strip()[2:].lower().zfill(64)


def octas_to_apt(octas: int) -> float:
    return octas / OCTAS_PER_APT


def _encode_argument(value: Any) -> Any:
    # Move u64/u128 travel as decimal strings in the JSON API
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        return str(value)
    if isinstance(value, AccountAddress):
        return str(value)
    if isinstance(value, (list, tuple)):
        return [_encode_argument(item) for item in value]
    return value


def u64_arg(value: int) -> TransactionArgument:
    return TransactionArgument(value, Serializer.u64)


def address_arg(value: str) -> TransactionArgument:
    account = AccountAddress.from_str(normalize_address(value))
    return TransactionArgument(account, Serializer.struct)


def string_arg(value: str) -> TransactionArgument:
    return TransactionArgument(value, Serializer.str)


def bool_arg(value: bool) -> TransactionArgument:
    return TransactionArgument(value, Serializer.bool)


def to_transaction_argument(value: Any) -> TransactionArgument:
    """BCS-encode an untyped entry argument.

    ``int`` maps to ``u64``, ``0x`` hex strings to ``address`` and any other
    string to ``String``. Pass a ``TransactionArgument`` for anything else.
    """
    if isinstance(value, TransactionArgument):
        return value
    if isinstance(value, AccountAddress):
        return TransactionArgument(value, Serializer.struct)
    if isinstance(value, bool):
        return bool_arg(value)
    if isinstance(value, int):
        if value < 0:
            raise ValueError(f"Negative value for u64 argument: {value}")
        return u64_arg(value)
    if isinstance(value, str):
        return address_arg(value) if ADDRESS_RE.match(value) else string_arg(value)
    raise ValueError(f"Unsupported entry argument: {value!r}")


def _decode_view_result(raw: Any) -> list:
    if isinstance(raw, (bytes, bytearray)):
        raw = raw.decode("utf-8")
    if isinstance(raw, str):
        raw = json.loads(raw)
    if not isinstance(raw, list):
        raise ValueError(f"Unexpected view result: {raw!r}")
    return raw


def parse_bool(value: Any) -> bool:
    if isinstance(value, str):
        if value.lower() not in ("true", "false"):
            raise ValueError(f"Not a boolean: {value!r}")
        return value.lower() == "true"
    if not isinstance(value, bool):
        raise ValueError(f"Not a boolean: {value!r}")
    return value


def parse_int(value: Any) -> int:
    if isinstance(value, bool):
        raise ValueError(f"Not an integer: {value!r}")
    return int(value)


class VaultChainClient:
    """Thin wrapper around ``RestClient`` bound to one vault and one signer.

    Holds no state between calls besides the frozen config and the signing
    account, so one instance can be shared for the lifetime of a process.
    """

    def __init__(
        self,
        config: Optional[ChainConfig] = None,
        rest_client: Optional[RestClient] = None,
    ) -> None:
        self._config = config or self._load_config()
        self._account: Account = self._load_account(self._config.private_key.get_secret_value())
        self.rest_client = rest_client or RestClient(
            self._config.rpc_url,
            ClientConfig(
                gas_unit_price=self._config.gas_unit_price,
                max_gas_amount=self._config.max_gas_amount,
                transaction_wait_in_seconds=int(self._config.transaction_timeout_secs),
            ),
        )
        self._check_public_key()
        logger.info(
            "Vault client ready: network=%s vault=%s signer=%s",
            self._config.network,
            self._config.vault_address,
            self.address,
        )

    @staticmethod
    def _load_config() -> ChainConfig:
        try:
            return ChainConfig()
        except ValidationError as exc:
            fields = ", ".join(str(err["loc"][0]) for err in exc.errors() if err.get("loc"))
            raise ConfigurationError(f"Invalid chain configuration: {fields}") from exc

    @staticmethod
    def _load_account(key: str) -> Account:
        raw = key.strip()
        if raw.startswith(PRIVATE_KEY_PREFIX):
            raw = raw[len(PRIVATE_KEY_PREFIX):]
        if raw.startswith("0x"):
            raw = raw[2:]
        if not raw:
            raise ConfigurationError("Missing PRIVATE_KEY")
        if len(raw) != 64 or any(c not in HEX_CHARS for c in raw):
            raise ConfigurationError("Invalid private key")
        try:
            return Account.load_key(f"{PRIVATE_KEY_PREFIX}0x{raw}")
        except Exception as exc:
            raise ConfigurationError("Invalid private key") from exc

    def _check_public_key(self) -> None:
        expected = self._config.public_key.strip().lower()
        if not expected:
            return
        known = {str(self._account.public_key()).lower(), self.address.lower()}
        if expected not in known:
            logger.warning("PUBLIC_KEY does not match the signer derived from PRIVATE_KEY")

    @property
    def address(self) -> str:
        return str(self._account.address())

    def __repr__(self) -> str:
        return f"VaultChainClient(network={self._config.network}, address={self.address})"

    def get_config(self) -> ChainConfig:
        return self._config

    def get_account(self) -> Account:
        return self._account

    def vault_function(self, name: str) -> str:
        return f"{self._config.vault_address}::{VAULT_MODULE}::{name}"

    def _qualify(self, entry_point: str) -> str:
        if "::" in entry_point:
            parts = entry_point.split("::")
            if len(parts) != 3 or not ADDRESS_RE.match(parts[0]) or not all(
                IDENTIFIER_RE.match(p) for p in parts[1:]
            ):
                raise ValueError(f"Invalid entry function: {entry_point}")
            return entry_point
        if not IDENTIFIER_RE.match(entry_point):
            raise ValueError(f"Invalid entry function: {entry_point}")
        return self.vault_function(entry_point)

    def build_payload(self, entry_point: str, args: Optional[list] = None) -> TransactionPayload:
        """BCS entry-function payload; raises ValueError on a bad name or argument."""
        address, module, name = self._qualify(entry_point).split("::")
        arguments = [to_transaction_argument(arg) for arg in (args or [])]
        try:
            module_id = f"{normalize_address(address)}::{module}"
            entry = EntryFunction.natural(module_id, name, [], arguments)
        except Exception as exc:
            # Serializer reports out-of-range integers with a bare Exception
            raise ValueError(f"Cannot encode arguments for {name}: {exc}") from exc
        return TransactionPayload(entry)

    async def _wait_until_final(self, tx_hash: str) -> dict:
        while await self.rest_client.transaction_pending(tx_hash):
            await asyncio.sleep(TX_POLL_INTERVAL_SECS)
        return await self.rest_client.transaction_by_hash(tx_hash)

    async def submit_transaction(
        self, entry_point: str, args: Optional[list] = None
    ) -> TransactionResult:
        """Sign, submit and wait for one entry-function call.

        ``transaction_timeout_secs`` bounds the whole call, from building the
        raw transaction to reading the committed effects.
        """
        try:
            payload = self.build_payload(entry_point, args)
        except ValueError as exc:
            raise TransactionError(str(exc)) from exc
        function = f"{payload.value.module}::{payload.value.function}"
        timeout = self._config.transaction_timeout_secs
        loop = asyncio.get_running_loop()
        deadline = loop.time() + timeout

        def remaining() -> float:
            return max(deadline - loop.time(), 0)

        tx_hash: Optional[str] = None
        try:
            signed = await asyncio.wait_for(
                self.rest_client.create_bcs_signed_transaction(self._account, payload),
                remaining(),
            )
            tx_hash = await asyncio.wait_for(
                self.rest_client.submit_bcs_transaction(signed), remaining()
            )
            logger.info("Submitted %s tx=%s", function, tx_hash)
            details = await asyncio.wait_for(self._wait_until_final(tx_hash), remaining())
        except asyncio.TimeoutError as exc:
            logger.error("Transaction %s not finalized within %ss (tx=%s)", function, timeout, tx_hash)
            raise TransactionError(
                f"Transaction not finalized within {timeout}s", tx_hash=tx_hash
            ) from exc
        except Exception as exc:
            logger.error("Transaction %s failed: %s", function, exc)
            raise TransactionError(
                str(exc) or exc.__class__.__name__,
                tx_hash=tx_hash,
                status_code=getattr(exc, "status_code", None),
            ) from exc

        if not details.get("success", False):
            vm_status = details.get("vm_status", "unknown failure")
            logger.error("Transaction %s aborted on-chain: %s (tx=%s)", function, vm_status, tx_hash)
            raise TransactionError(vm_status, tx_hash=tx_hash)

        return TransactionResult(
            success=True,
            tx_hash=tx_hash,
            vm_status=details.get("vm_status"),
            gas_used=int(details.get("gas_used", 0) or 0),
            events=list(details.get("events") or []),
            changes=list(details.get("changes") or []),
        )

    async def call_view(
        self,
        function_name: str,
        args: Optional[list] = None,
        type_args: Optional[list[str]] = None,
    ) -> list:
        if not IDENTIFIER_RE.match(function_name or ""):
            raise ViewCallError(str(function_name), "invalid function name")
        try:
            raw = await self.rest_client.view(
                self.vault_function(function_name),
                list(type_args or []),
                [_encode_argument(arg) for arg in (args or [])],
            )
            return _decode_view_result(raw)
        except Exception as exc:
            logger.error("View function %s failed: %s", function_name, exc)
            raise ViewCallError(function_name, str(exc) or exc.__class__.__name__) from exc

    async def view_value(
        self, function_name: str, args: list, cast: Callable[[Any], Any]
    ) -> Any:
        result = await self.call_view(function_name, args)
        if not result:
            raise ViewCallError(function_name, "empty result")
        try:
            return cast(result[0])
        except (TypeError, ValueError) as exc:
            raise ViewCallError(function_name, f"unexpected value {result[0]!r}") from exc

    async def is_vault_initialized(self) -> bool:
        try:
            return await self.view_value("is_initialized", [self._config.vault_address], parse_bool)
        except ViewCallError:
            return False

    async def get_vault_state(self) -> VaultState:
        vault = self._config.vault_address
        try:
            total_assets = await self.view_value("total_assets", [vault], parse_int)
            total_shares = await self.view_value("total_shares", [vault], parse_int)
            asset_token = await self.view_value("get_asset_token", [vault], str)
            is_initialized = await self.view_value("is_initialized", [vault], parse_bool)
        except ViewCallError as exc:
            logger.error("Failed to get vault state: %s", exc)
            raise
        return VaultState(
            total_assets=total_assets,
            total_shares=total_shares,
            asset_token=asset_token,
            is_initialized=is_initialized,
        )

    async def get_user_shares(self, address: Optional[str] = None) -> int:
        owner = address or self.address
        try:
            return await self.view_value(
                "get_user_shares", [self._config.vault_address, owner], parse_int
            )
        except ViewCallError as exc:
            logger.error("Failed to get user shares for %s: %s", owner, exc)
            return 0

    async def get_account_balance(self, address: Optional[str] = None) -> int:
        """APT balance in octas; 0 when the account has no coin store."""
        owner = address or self.address
        try:
            account = AccountAddress.from_str(normalize_address(owner))
            resources = await self.rest_client.account_resources(account)
            for resource in resources:
                if resource.get("type") == APTOS_COIN_STORE:
                    return int(resource["data"]["coin"]["value"])
        except Exception as exc:
            logger.error("Failed to get account balance for %s: %s", owner, exc)
        return 0

    async def get_transaction(self, tx_hash: str) -> dict:
        try:
            return await self.rest_client.transaction_by_hash(tx_hash)
        except Exception as exc:
            logger.error("Failed to fetch transaction %s: %s", tx_hash, exc)
            raise TransactionError(
                str(exc) or exc.__class__.__name__,
                tx_hash=tx_hash,
                status_code=getattr(exc, "status_code", None),
            ) from exc

    async def node_info(self) -> dict:
        return await self.rest_client.info()

    async def close(self) -> None:
        await self.rest_client.close()

    async def __aenter__(self) -> "VaultChainClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()
