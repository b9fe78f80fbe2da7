from fastapi import APIRouter

from plexi.models.schemas import WalletSessionSchema
from plexi.session import get_wallet_session

router = APIRouter(prefix="/api/wallet", tags=["Wallet"])


# Read-only: connect/disconnect are in-process calls on WalletSession.
@router.get("/session", response_model=WalletSessionSchema)
async def wallet_session():
    return get_wallet_session().snapshot().to_dict()
