
from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from ..deps import get_auth_service, get_capture_session, get_current_user, require_admin
from ...models import User
from ...services.auth import AuthService
from ...services.workflow import CaptureSession

router = APIRouter(prefix="/auth", tags=["auth"])


class LoginRequest(BaseModel):
    email: str


class SubUserRequest(BaseModel):
    email: str
    name: str


@router.post("/login", response_model=User)
async def login(
    req: LoginRequest,
    auth: AuthService = Depends(get_auth_service),
    session: CaptureSession = Depends(get_capture_session),
):
    """Log in by email. Unknown emails get 401 with a user-facing message."""
    user = await auth.login(req.email.strip())
    await session.load()
    return user


@router.post("/google", response_model=User)
async def login_with_google(
    auth: AuthService = Depends(get_auth_service),
    session: CaptureSession = Depends(get_capture_session),
):
    user = await auth.login_with_google()
    await session.load()
    return user


@router.post("/logout")
async def logout(
    auth: AuthService = Depends(get_auth_service),
    session: CaptureSession = Depends(get_capture_session),
):
    auth.logout()
    session.reset()
    return {"status": "logged_out"}


@router.get("/me", response_model=User)
async def me(user: User = Depends(get_current_user)):
    return user


@router.get("/users", response_model=list[User])
async def list_users(
    _: User = Depends(require_admin),
    auth: AuthService = Depends(get_auth_service),
):
    return auth.list_sub_users()


@router.post("/users", response_model=User, status_code=201)
async def create_user(
    req: SubUserRequest,
    admin: User = Depends(require_admin),
    auth: AuthService = Depends(get_auth_service),
):
    return auth.create_sub_user(admin, req.email.strip(), req.name.strip())


@router.delete("/users/{user_id}")
async def remove_user(
    user_id: str,
    admin: User = Depends(require_admin),
    auth: AuthService = Depends(get_auth_service),
):
    if not auth.remove_sub_user(admin, user_id):
        raise HTTPException(status_code=404, detail="User not found")
    return {"status": "removed", "id": user_id}
