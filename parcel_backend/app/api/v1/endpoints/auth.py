"""
Authentication API endpoints.

Tokens are issued by the identity provider; this service can only revoke them.
"""

from fastapi import APIRouter, Depends
from parcel_backend.app.core.dependencies import get_current_principal
from parcel_backend.app.core.token_revocation import revoke_token
from parcel_backend.app.schemas.user import LogoutResponse

router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.post("/logout", response_model=LogoutResponse)
async def logout(principal: dict = Depends(get_current_principal)):
    """Revoke the presented bearer token until it would have expired."""
    revoked = await revoke_token(
        principal["token"],
        principal["email"],
        expires_at=principal.get("exp"),
    )
    return LogoutResponse(revoked=revoked)
