"""On-chain integration helpers."""

from plexi.onchain.client import TransactionResult, VaultChainClient, VaultState
from plexi.onchain.errors import ConfigurationError, TransactionError, ViewCallError
from plexi.onchain.operations import VaultOperations

__all__ = [
    "ConfigurationError",
    "TransactionError",
    "TransactionResult",
    "VaultChainClient",
    "VaultOperations",
    "VaultState",
    "ViewCallError",
]
