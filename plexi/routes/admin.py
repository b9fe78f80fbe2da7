import hmac
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Header, HTTPException

from plexi.config import settings
from plexi.models.schemas import RebalanceRequest, TransactionResultSchema
from plexi.onchain.client import VaultChainClient
from plexi.onchain.errors import TransactionError
from plexi.onchain.operations import VaultOperations
from plexi.routes.vault import require_vault_client

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["Admin"])


def require_admin(x_admin_token: Optional[str] = Header(None)) -> None:
    if not settings.transactions_enabled:
        raise HTTPException(status_code=403, detail="Transactions disabled")
    if not settings.admin_token or not x_admin_token or not hmac.compare_digest(
        x_admin_token, settings.admin_token
    ):
        raise HTTPException(status_code=401, detail="Invalid admin token")


@router.post(
    "/vault/rebalance",
    response_model=TransactionResultSchema,
    summary="Trigger a vault rebalance",
    dependencies=[Depends(require_admin)],
)
async def trigger_rebalance(
    request: RebalanceRequest,
    client: VaultChainClient = Depends(require_vault_client),
):
    ops = VaultOperations(client)
    try:
        result = await ops.trigger_rebalance(request.hedge_allocation, request.farm_allocation)
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    except TransactionError as exc:
        raise HTTPException(status_code=502, detail=str(exc)) from exc
    logger.info(
        "Rebalance triggered hedge=%s farm=%s tx=%s",
        request.hedge_allocation,
        request.farm_allocation,
        result.tx_hash,
    )
    return TransactionResultSchema(**result.to_dict())
