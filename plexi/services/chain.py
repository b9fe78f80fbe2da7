import logging
from typing import Optional

from plexi.onchain.client import VaultChainClient
from plexi.onchain.errors import ConfigurationError

logger = logging.getLogger(__name__)

_vault_client: Optional[VaultChainClient] = None


def get_vault_client() -> VaultChainClient:
    """Shared client; raises ConfigurationError until PRIVATE_KEY is usable."""
    global _vault_client
    if _vault_client is None:
        _vault_client = VaultChainClient()
    return _vault_client


async def close_vault_client() -> None:
    global _vault_client
    if _vault_client is None:
        return
    try:
        await _vault_client.close()
    except Exception as exc:
        logger.warning("Closing vault client failed: %s", exc)
    _vault_client = None


def get_chain_client() -> Optional[VaultChainClient]:
    """Route dependency: the shared client, or None while the config is unusable."""
    try:
        return get_vault_client()
    except ConfigurationError as exc:
        logger.debug("Vault client unavailable: %s", exc)
        return None
