from __future__ import annotations

from datetime import datetime, timezone
import time
from typing import Optional, Tuple

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from plexi.config import settings
from plexi.onchain.client import VaultChainClient
from plexi.services.chain import get_chain_client

router = APIRouter()


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


async def check_node(
    client: Optional[VaultChainClient],
) -> Tuple[bool, Optional[float], Optional[str], Optional[int]]:
    """Ping the fullnode; returns (ok, latency_ms, error, ledger_version)."""
    if client is None:
        return False, None, "Vault client not configured", None
    start = time.perf_counter()
    try:
        info = await client.node_info()
        latency_ms = (time.perf_counter() - start) * 1000
        ledger_version = info.get("ledger_version")
        return True, latency_ms, None, int(ledger_version) if ledger_version is not None else None
    except Exception as exc:
        latency_ms = (time.perf_counter() - start) * 1000
        return False, latency_ms, str(exc), None


@router.get("/health/live")
async def liveness_check() -> dict:
    return {
        "status": "alive",
        "version": settings.api_version,
        "timestamp": utc_now_iso(),
    }


@router.get("/health/ready")
async def readiness_check(client: Optional[VaultChainClient] = Depends(get_chain_client)):
    ok, latency_ms, _, _ = await check_node(client)
    payload = {
        "status": "ready" if ok else "not_ready",
        "version": settings.api_version,
        "timestamp": utc_now_iso(),
        "node": "ok" if ok else "error",
        "node_latency_ms": round(latency_ms, 2) if latency_ms is not None else None,
    }
    if ok:
        return payload
    return JSONResponse(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, content=payload)


@router.get("/health")
async def health_check(client: Optional[VaultChainClient] = Depends(get_chain_client)):
    """Always 200; use /health/ready for a strict node-aware probe."""
    ok, latency_ms, error, _ = await check_node(client)
    payload = {
        "status": "ok" if ok else "degraded",
        "version": settings.api_version,
        "timestamp": utc_now_iso(),
        "node": "ok" if ok else "unavailable",
        "node_latency_ms": round(latency_ms, 2) if latency_ms is not None else None,
    }
    if not ok:
        payload["node_error"] = error
    return payload


@router.get("/health/detailed")
async def detailed_health(client: Optional[VaultChainClient] = Depends(get_chain_client)):
    ok, latency_ms, error, ledger_version = await check_node(client)
    payload = {
        "status": "ok" if ok else "error",
        "version": settings.api_version,
        "timestamp": utc_now_iso(),
        "checks": {
            "node": {
                "status": "ok" if ok else "error",
                "latency_ms": round(latency_ms, 2) if latency_ms is not None else None,
                "ledger_version": ledger_version,
                "error": error,
            }
        },
    }
    if ok:
        return payload
    return JSONResponse(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, content=payload)
