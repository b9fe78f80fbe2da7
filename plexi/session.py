"""Process-wide wallet connection state shared with the dashboard."""
from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Callable, Optional

from plexi.onchain.client import normalize_address

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WalletConnection:
    connected: bool = False
    address: Optional[str] = None
    public_key: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "connected": self.connected,
            "address": self.address,
            "public_key": self.public_key,
        }


Listener = Callable[[WalletConnection], None]


class WalletSession:
    """Single holder for the connected wallet.

    Presentation code reads ``snapshot()`` or registers a listener with
    ``subscribe``; only ``connect``/``disconnect`` change the state.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._state = WalletConnection()
        self._listeners: list[Listener] = []

    def snapshot(self) -> WalletConnection:
        return self._state

    @property
    def connected(self) -> bool:
        return self._state.connected

    def connect(self, address: str, public_key: Optional[str] = None) -> WalletConnection:
        state = WalletConnection(
            connected=True,
            address=normalize_address(address),
            public_key=public_key or None,
        )
        self._set(state)
        logger.info("Wallet connected: %s", state.address)
        return state

    def disconnect(self) -> None:
        if not self._state.connected:
            return
        logger.info("Wallet disconnected: %s", self._state.address)
        self._set(WalletConnection())

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    def _set(self, state: WalletConnection) -> None:
        with self._lock:
            self._state = state
            listeners = list(self._listeners)
        for listener in listeners:
            try:
                listener(state)
            except Exception as exc:
                logger.error("Wallet listener failed: %s", exc)


_wallet_session: Optional[WalletSession] = None


def get_wallet_session() -> WalletSession:
    global _wallet_session
    if _wallet_session is None:
        _wallet_session = WalletSession()
    return _wallet_session


def reset_wallet_session() -> None:
    global _wallet_session
    if _wallet_session is not None:
        _wallet_session.disconnect()
    _wallet_session = None
