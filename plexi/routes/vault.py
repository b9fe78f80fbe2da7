from __future__ import annotations

import re
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Path, Query

from plexi.models.schemas import (
    AccountBalanceSchema,
    ConversionSchema,
    RewardTokensSchema,
    StrategyCountSchema,
    UserPositionSchema,
    VaultConfigSchema,
    VaultInitializedSchema,
    VaultStateSchema,
)
from plexi.onchain.client import VaultChainClient, normalize_address, octas_to_apt
from plexi.onchain.errors import TransactionError, ViewCallError
from plexi.onchain.operations import VaultOperations
from plexi.services.chain import get_chain_client

router = APIRouter(prefix="/api/vault", tags=["Vault"])

TX_HASH_RE = re.compile(r"^0x[a-fA-F0-9]{64}$")


def require_vault_client(
    client: Optional[VaultChainClient] = Depends(get_chain_client),
) -> VaultChainClient:
    if client is None:
        raise HTTPException(status_code=503, detail="Vault client unavailable")
    return client


def validate_address(address: str) -> str:
    try:
        return normalize_address(address)
    except ValueError as exc:
        raise HTTPException(status_code=422, detail="Invalid account address") from exc


@router.get("/config", response_model=VaultConfigSchema, summary="Chain configuration")
async def vault_config(client: VaultChainClient = Depends(require_vault_client)):
    return client.get_config().safe_dict()


@router.get("/state", response_model=VaultStateSchema, summary="Current vault state")
async def vault_state(client: VaultChainClient = Depends(require_vault_client)):
    try:
        state = await client.get_vault_state()
    except ViewCallError as exc:
        raise HTTPException(status_code=502, detail=str(exc)) from exc
    return VaultStateSchema(**state.to_dict(), sharePrice=state.share_price)


@router.get("/initialized", response_model=VaultInitializedSchema)
async def vault_initialized(client: VaultChainClient = Depends(require_vault_client)):
    return VaultInitializedSchema(initialized=await client.is_vault_initialized())


@router.get(
    "/users/{address}/position",
    response_model=UserPositionSchema,
    summary="User shares and their asset value",
)
async def user_position(
    address: str = Path(..., description="Aptos account address (0x...)"),
    client: VaultChainClient = Depends(require_vault_client),
):
    address = validate_address(address)
    shares = await client.get_user_shares(address)
    try:
        state = await client.get_vault_state()
    except ViewCallError as exc:
        raise HTTPException(status_code=502, detail=str(exc)) from exc
    share_price = state.share_price
    return UserPositionSchema(
        walletAddress=address,
        shares=shares,
        assetsEquivalent=shares * share_price,
        sharePrice=share_price,
    )


@router.get("/accounts/{address}/balance", response_model=AccountBalanceSchema)
async def account_balance(
    address: str = Path(..., description="Aptos account address (0x...)"),
    client: VaultChainClient = Depends(require_vault_client),
):
    address = validate_address(address)
    octas = await client.get_account_balance(address)
    return AccountBalanceSchema(address=address, octas=octas, apt=octas_to_apt(octas))


@router.get("/strategies/count", response_model=StrategyCountSchema)
async def strategy_count(client: VaultChainClient = Depends(require_vault_client)):
    try:
        count = await VaultOperations(client).get_strategy_count()
    except ViewCallError as exc:
        raise HTTPException(status_code=502, detail=str(exc)) from exc
    return StrategyCountSchema(count=count)


@router.get("/reward-tokens", response_model=RewardTokensSchema)
async def reward_tokens(client: VaultChainClient = Depends(require_vault_client)):
    try:
        tokens = await VaultOperations(client).get_reward_tokens()
    except ViewCallError as exc:
        raise HTTPException(status_code=502, detail=str(exc)) from exc
    return RewardTokensSchema(tokens=tokens)


@router.get("/transactions/{tx_hash}", summary="On-chain transaction details")
async def transaction_details(
    tx_hash: str = Path(..., description="Transaction hash (0x + 64 hex)"),
    client: VaultChainClient = Depends(require_vault_client),
) -> dict:
    if not TX_HASH_RE.match(tx_hash):
        raise HTTPException(status_code=422, detail="Invalid transaction hash")
    try:
        return await client.get_transaction(tx_hash)
    except TransactionError as exc:
        if exc.status_code == 404:
            raise HTTPException(status_code=404, detail="Transaction not found") from exc
        raise HTTPException(status_code=502, detail=str(exc)) from exc


@router.get("/convert/to-shares", response_model=ConversionSchema)
async def convert_to_shares(
    assets: int = Query(..., ge=0, description="Asset amount in base units"),
    client: VaultChainClient = Depends(require_vault_client),
):
    try:
        shares = await VaultOperations(client).convert_to_shares(assets)
    except ViewCallError as exc:
        raise HTTPException(status_code=502, detail=str(exc)) from exc
    return ConversionSchema(assets=assets, shares=shares)


@router.get("/convert/to-assets", response_model=ConversionSchema)
async def convert_to_assets(
    shares: int = Query(..., ge=0, description="Share amount"),
    client: VaultChainClient = Depends(require_vault_client),
):
    try:
        assets = await VaultOperations(client).convert_to_assets(shares)
    except ViewCallError as exc:
        raise HTTPException(status_code=502, detail=str(exc)) from exc
    return ConversionSchema(assets=assets, shares=shares)
