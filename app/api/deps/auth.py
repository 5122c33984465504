# app/api/deps/auth.py
# Two credential tiers, mirroring the managed store's keys:
#   anon         -> reads (and analytics tracking)
#   service_role -> everything else
from __future__ import annotations

import hmac
from typing import Literal, Optional

from fastapi import Depends, Header, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.core.settings import settings

Tier = Literal["anon", "service_role"]

# non-fatal if the header is missing; `apikey` may carry the key instead
_bearer = HTTPBearer(auto_error=False)


def _matches(presented: str, expected: str) -> bool:
    return hmac.compare_digest(presented.encode("utf-8"), expected.encode("utf-8"))


def get_api_tier(
    apikey: Optional[str] = Header(None),
    creds: Optional[HTTPAuthorizationCredentials] = Depends(_bearer),
) -> Tier:
    key = apikey or (creds.credentials if creds else None)
    if not key:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="API key required")
    if _matches(key, settings.SUPABASE_SERVICE_ROLE_KEY):
        return "service_role"
    if _matches(key, settings.SUPABASE_ANON_KEY):
        return "anon"
    raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid API key")


def require_read_access(tier: Tier = Depends(get_api_tier)) -> Tier:
    return tier


def require_service_role(tier: Tier = Depends(get_api_tier)) -> Tier:
    """
    Usage:
        @router.post(..., dependencies=[Depends(require_service_role)])
    """
    if tier != "service_role":
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Service role key required")
    return tier
