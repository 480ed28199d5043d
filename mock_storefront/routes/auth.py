"""Token issuing routes standing in for the external auth service"""

import logging

from fastapi import APIRouter
from pydantic import BaseModel, Field

from ..security.auth import create_access_token

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["Auth"])


class TokenRequest(BaseModel):
    """Shopper to issue a token for"""
    user_id: str = Field(min_length=1)


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"


@router.post("/token", response_model=TokenResponse)
async def issue_token(request: TokenRequest):
    """Issue an access token; no credentials are checked in the mock"""
    logger.info(f"Issued access token for {request.user_id}")
    return TokenResponse(access_token=create_access_token(request.user_id))
