"""Session endpoints backed by Supabase Auth."""

from fastapi import APIRouter, Depends

from app.core.config import Settings, get_settings
from app.core.security import AuthUser, get_access_token, get_current_user, sign_out
from app.schemas.auth import UserRead

router = APIRouter()


@router.get("/me", response_model=UserRead)
async def me(user: AuthUser = Depends(get_current_user)):
    """The signed-in user."""
    return UserRead(id=user.id, email=user.email)


@router.post("/signout", status_code=204)
async def signout(
    user: AuthUser = Depends(get_current_user),
    token: str = Depends(get_access_token),
    settings: Settings = Depends(get_settings),
):
    """End the session at the auth provider. The client then goes back to the login page."""
    await sign_out(token, settings)
    return None
