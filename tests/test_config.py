import pytest
from pydantic import ValidationError

from plexi.config import DEFAULT_RPC_URL, DEFAULT_VAULT_ADDRESS, ChainConfig, Settings

CHAIN_ENV = (
    "RPC_URL",
    "NETWORK",
    "VAULT_ADDRESS",
    "PRIVATE_KEY",
    "PUBLIC_KEY",
    "ASSET_TOKEN",
    "REBALANCE_COOLDOWN",
    "GAS_UNIT_PRICE",
    "MAX_GAS_AMOUNT",
    "TRANSACTION_TIMEOUT_SECS",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in CHAIN_ENV:
        monkeypatch.delenv(name, raising=False)


def test_chain_config_defaults() -> None:
    config = ChainConfig(_env_file=None)
    assert config.rpc_url == DEFAULT_RPC_URL
    assert config.network == "testnet"
    assert config.vault_address == DEFAULT_VAULT_ADDRESS
    assert config.asset_token == "USDC"
    assert config.rebalance_cooldown == 3600
    assert config.gas_unit_price == 100
    assert config.max_gas_amount == 10_000
    assert config.transaction_timeout_secs == 30
    assert config.private_key.get_secret_value() == ""


def test_chain_config_reads_env(monkeypatch) -> None:
    monkeypatch.setenv("RPC_URL", "https://fullnode.mainnet.aptoslabs.com/v1/")
    monkeypatch.setenv("NETWORK", "MAINNET")
    monkeypatch.setenv("GAS_UNIT_PRICE", "150")
    monkeypatch.setenv("PRIVATE_KEY", "ed25519-priv-0x" + "1" * 64)
    config = ChainConfig(_env_file=None)
    assert config.rpc_url == "https://fullnode.mainnet.aptoslabs.com/v1"
    assert config.network == "mainnet"
    assert config.gas_unit_price == 150
    assert config.private_key.get_secret_value().endswith("1" * 64)


def test_blank_numeric_env_uses_default(monkeypatch) -> None:
    monkeypatch.setenv("MAX_GAS_AMOUNT", "")
    monkeypatch.setenv("REBALANCE_COOLDOWN", "  ")
    config = ChainConfig(_env_file=None)
    assert config.max_gas_amount == 10_000
    assert config.rebalance_cooldown == 3600


def test_unknown_network_rejected() -> None:
    with pytest.raises(ValidationError):
        ChainConfig(_env_file=None, network="moonnet")


def test_chain_config_is_frozen() -> None:
    config = ChainConfig(_env_file=None)
    with pytest.raises(ValidationError):
        config.gas_unit_price = 1


def test_safe_dict_has_no_key_material() -> None:
    config = ChainConfig(_env_file=None, private_key="0x" + "f" * 64)
    safe = config.safe_dict()
    assert "private_key" not in safe
    assert "f" * 64 not in str(safe)
    assert "f" * 64 not in repr(config)


def test_cors_origins_parses_comma_separated(monkeypatch) -> None:
    monkeypatch.setenv("CORS_ORIGINS", "http://a.test, http://b.test")
    settings = Settings()
    assert settings.cors_origins == ["http://a.test", "http://b.test"]


def test_cors_origins_parses_json_list(monkeypatch) -> None:
    monkeypatch.setenv("CORS_ORIGINS", "[\"http://a.test\",\"http://b.test\"]")
    settings = Settings()
    assert settings.cors_origins == ["http://a.test", "http://b.test"]


def test_transactions_disabled_by_default(monkeypatch) -> None:
    monkeypatch.delenv("TRANSACTIONS_ENABLED", raising=False)
    settings = Settings(_env_file=None)
    assert settings.transactions_enabled is False
