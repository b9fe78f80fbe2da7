"""Errors raised by the vault chain client."""
from __future__ import annotations

from typing import Optional


class VaultClientError(Exception):
    pass


class ConfigurationError(VaultClientError):
    """Unusable configuration or key material. Never retried."""


class TransactionError(VaultClientError):
    def __init__(
        self,
        message: str,
        tx_hash: Optional[str] = None,
        status_code: Optional[int] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.tx_hash = tx_hash
        self.status_code = status_code

    def __str__(self) -> str:
        if self.tx_hash:
            return f"{self.message} (tx={self.tx_hash})"
        return self.message


class ViewCallError(VaultClientError):
    def __init__(self, function: str, message: str) -> None:
        super().__init__(f"View function {function} failed: {message}")
        self.function = function
        self.message = message
