"""Users router — the authenticated user's own profile and balance."""

from fastapi import APIRouter, Depends

from vacation_backend.auth.dependencies import get_current_user, is_admin
from vacation_backend.users.models import User
from vacation_backend.users.schemas import UserOut

router = APIRouter(prefix="", tags=["users"])


@router.get("/me", response_model=UserOut)
async def read_me(user: User = Depends(get_current_user)):
    """Return the current user with their remaining vacation days."""
    out = UserOut.model_validate(user)
    out.is_admin = is_admin(user)
    return out
