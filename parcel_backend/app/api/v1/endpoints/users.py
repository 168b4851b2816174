"""
User API Endpoints.

Sign-in upsert, role lookup and admin role management.
"""

from typing import List, Optional
from fastapi import APIRouter, Depends, Path, Query, status
from fastapi.responses import JSONResponse
from parcel_backend.app.core.dependencies import get_account_service, get_current_principal
from parcel_backend.app.core.guards import require_role
from parcel_backend.app.models.enums import UserRole
from parcel_backend.app.schemas.user import (
    UserUpsert, UserUpsertResponse, RoleResponse, RoleUpdate, RoleUpdateResponse, UserResponse
)
from parcel_backend.app.services.accounts import AccountService

router = APIRouter(prefix="/users", tags=["Users"])


@router.post("", response_model=UserUpsertResponse)
async def upsert_user(
    user_data: UserUpsert,
    accounts: AccountService = Depends(get_account_service)
):
    """
    Create the account on first sign-in, refresh last_log_in afterwards.

    Returns 201 with inserted=true for a new account, 200 with inserted=false
    for an existing one.
    """
    user, inserted = await accounts.upsert(
        email=user_data.email,
        name=user_data.name,
        photo_url=user_data.photo_url,
        last_log_in=user_data.last_log_in,
    )
    body = UserUpsertResponse(
        message="User created" if inserted else "User already exists",
        inserted=inserted,
        user_id=user.id,
    )
    return JSONResponse(
        status_code=status.HTTP_201_CREATED if inserted else status.HTTP_200_OK,
        content=body.model_dump()
    )


@router.get("/search", response_model=List[UserResponse])
async def search_users(
    email: Optional[str] = Query(None, description="Partial, case-insensitive email"),
    current_user: dict = Depends(require_role([UserRole.ADMIN])),
    accounts: AccountService = Depends(get_account_service)
):
    """Find up to 10 accounts by email fragment (admin only)."""
    users = await accounts.search(email)
    return [UserResponse.model_validate(u) for u in users]


@router.get("/{email}/role", response_model=RoleResponse)
async def get_user_role(
    email: str = Path(..., description="Account email"),
    principal: dict = Depends(get_current_principal),
    accounts: AccountService = Depends(get_account_service)
):
    """Current role of an account."""
    return RoleResponse(role=await accounts.get_role(email))


@router.patch("/{user_id}/role", response_model=RoleUpdateResponse)
async def update_user_role(
    user_id: int = Path(..., description="User ID"),
    role_data: RoleUpdate = ...,
    current_user: dict = Depends(require_role([UserRole.ADMIN])),
    accounts: AccountService = Depends(get_account_service)
):
    """Grant user or admin (admin only). 404 when nothing changed."""
    new_role = await accounts.set_role(user_id, role_data.role, actor=current_user["email"])
    return RoleUpdateResponse(success=True, message=f"Role updated to {new_role.value}")
