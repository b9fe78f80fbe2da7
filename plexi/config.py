from __future__ import annotations

import json
from typing import Any

from pydantic import Field, SecretStr, ValidationInfo, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_RPC_URL = "https://fullnode.testnet.aptoslabs.com/v1"
DEFAULT_VAULT_ADDRESS = "0x98dfcb742ea92c051230fbc1defac9b9c8d298670d544c0e1a23b9620b3a27e2"
KNOWN_NETWORKS = ("mainnet", "testnet", "devnet", "local", "custom")


class ChainConfig(BaseSettings):
    """Network and signer configuration for the vault client.

    Frozen once built: a different network, vault or key needs a new
    ``ChainConfig`` and a new client.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
    )

    rpc_url: str = DEFAULT_RPC_URL
    network: str = "testnet"
    vault_address: str = DEFAULT_VAULT_ADDRESS
    private_key: SecretStr = SecretStr("")
    public_key: str = ""
    asset_token: str = "USDC"
    rebalance_cooldown: int = Field(default=3600, ge=0)
    gas_unit_price: int = Field(default=100, gt=0)
    max_gas_amount: int = Field(default=10_000, gt=0)
    transaction_timeout_secs: float = Field(default=30.0, gt=0)

    @field_validator(
        "rebalance_cooldown",
        "gas_unit_price",
        "max_gas_amount",
        "transaction_timeout_secs",
        mode="before",
    )
    @classmethod
    def blank_numeric_uses_default(cls, value: Any, info: ValidationInfo) -> Any:
        if isinstance(value, str) and value.strip() == "":
            return cls.model_fields[info.field_name].default
        return value

    @field_validator("network", mode="before")
    @classmethod
    def normalize_network(cls, value: Any) -> Any:
        if not isinstance(value, str):
            return value
        network = value.strip().lower() or "testnet"
        if network not in KNOWN_NETWORKS:
            raise ValueError(f"Unknown network '{value}', expected one of {', '.join(KNOWN_NETWORKS)}")
        return network

    @field_validator("rpc_url", mode="before")
    @classmethod
    def strip_trailing_slash(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().rstrip("/") or DEFAULT_RPC_URL
        return value

    @field_validator("vault_address", mode="before")
    @classmethod
    def normalize_vault_address(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().lower() or DEFAULT_VAULT_ADDRESS
        return value

    def safe_dict(self) -> dict:
        """Config without key material, for logs and the config endpoint."""
        return {
            "rpc_url": self.rpc_url,
            "network": self.network,
            "vault_address": self.vault_address,
            "public_key": self.public_key,
            "asset_token": self.asset_token,
            "rebalance_cooldown": self.rebalance_cooldown,
            "gas_unit_price": self.gas_unit_price,
            "max_gas_amount": self.max_gas_amount,
            "transaction_timeout_secs": self.transaction_timeout_secs,
        }


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        enable_decoding=False,
    )

    api_version: str = "0.1.0"
    cors_origins: list[str] = ["http://localhost:3000"]
    transactions_enabled: bool = False
    admin_token: str = ""

    @field_validator("cors_origins", mode="before")
    @classmethod
    def parse_cors_origins(cls, value):
        if isinstance(value, str):
            stripped = value.strip()
            if stripped.startswith("[") and stripped.endswith("]"):
                try:
                    parsed = json.loads(stripped)
                    if isinstance(parsed, list):
                        return [str(item).strip() for item in parsed if str(item).strip()]
                except json.JSONDecodeError:
                    pass
            return [item.strip() for item in value.split(",") if item.strip()]
        return value


settings = Settings()
