from fastapi import APIRouter, Depends
from app.modules.auth.schemas import (
    LoginRequest, RegisterRequest, TokenResponse, RegisterResponse, MeResponse
)
from app.modules.auth.service import AuthService
from app.core.dependencies import get_auth_service, get_current_token, get_current_user_id, is_admin
from app.config.permissions_config import global_permissions_for_role
from typing import Dict

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register", response_model=RegisterResponse, status_code=201)
async def register(
    register_data: RegisterRequest,
    service: AuthService = Depends(get_auth_service)
):
    """Register a new user"""
    return service.register(register_data)


@router.post("/login", response_model=TokenResponse)
async def login(
    login_data: LoginRequest,
    service: AuthService = Depends(get_auth_service)
):
    """Login and get access token"""
    return service.login(login_data)


@router.post("/logout", status_code=200)
async def logout(
    token: str = Depends(get_current_token),
    service: AuthService = Depends(get_auth_service)
):
    """Logout and invalidate token"""
    service.logout(token)
    return {"message": "Logged out successfully"}


@router.get("/me", response_model=MeResponse)
async def get_current_user(current_user: Dict = Depends(get_current_user_id)):
    """Get current authenticated user and the permissions they hold everywhere (for frontend UI)."""
    profile = current_user.get("profile") or {}
    return MeResponse(
        id=current_user["id"],
        email=current_user.get("email"),
        full_name=profile.get("full_name"),
        avatar_url=profile.get("avatar_url"),
        role=current_user.get("role", "user"),
        is_admin=is_admin(current_user),
        permissions=global_permissions_for_role(current_user.get("role", "user"))
    )
