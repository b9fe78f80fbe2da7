from __future__ import annotations

from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class VaultStateSchema(BaseModel):
    """Vault state as read from the Move module, in dashboard field names."""

    model_config = ConfigDict(populate_by_name=True)

    totalAssets: int = Field(ge=0)
    totalShares: int = Field(ge=0)
    assetToken: str
    isInitialized: bool
    sharePrice: float = Field(ge=0)


class VaultInitializedSchema(BaseModel):
    initialized: bool


class VaultConfigSchema(BaseModel):
    rpc_url: str
    network: str
    vault_address: str
    public_key: str
    asset_token: str
    rebalance_cooldown: int
    gas_unit_price: int
    max_gas_amount: int
    transaction_timeout_secs: float


class UserPositionSchema(BaseModel):
    walletAddress: str
    shares: int = Field(ge=0)
    assetsEquivalent: float = Field(ge=0)
    sharePrice: float = Field(ge=0)


class AccountBalanceSchema(BaseModel):
    address: str
    octas: int = Field(ge=0)
    apt: float = Field(ge=0)


class StrategyCountSchema(BaseModel):
    count: int = Field(ge=0)


class RewardTokensSchema(BaseModel):
    tokens: List[str]


class ConversionSchema(BaseModel):
    assets: int = Field(ge=0)
    shares: int = Field(ge=0)


class TransactionResultSchema(BaseModel):
    success: bool
    tx_hash: str
    vm_status: Optional[str] = None
    gas_used: int = 0
    events: List[Any] = []
    changes: List[Any] = []


class RebalanceRequest(BaseModel):
    """Allocation split in basis points."""

    hedge_allocation: int = Field(..., ge=0, le=10_000, description="Hedge allocation (bps)")
    farm_allocation: int = Field(..., ge=0, le=10_000, description="Farm allocation (bps)")


class WalletSessionSchema(BaseModel):
    connected: bool
    address: Optional[str] = None
    public_key: Optional[str] = None
