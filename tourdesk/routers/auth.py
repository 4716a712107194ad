# tourdesk/routers/auth.py

from fastapi import APIRouter, Depends, HTTPException, Request, Response

from tourdesk.config.settings import Settings
from tourdesk.deps import client_ip, get_current_user, get_login_limiter, get_settings, get_store
from tourdesk.logging_config import get_logger
from tourdesk.schemas_pkg.auth import AuthResponse, LoginRequest, RegisterRequest, UserOut
from tourdesk.security import create_session_token
from tourdesk.services.auth_service import authenticate, public_user, register_user
from tourdesk.services.rate_limit import RateLimitStore
from tourdesk.storage import RecordStore

logger = get_logger(__name__)

# main.py mounts this with prefix="/api/auth"
router = APIRouter(tags=["Auth"])


def _set_session_cookie(response: Response, settings: Settings, user: dict) -> None:
    token = create_session_token(
        {"sub": user.get("id"), "email": user.get("email"), "role": user.get("role") or "customer"},
        settings.SESSION_SECRET,
        settings.SESSION_MAX_AGE_SECONDS,
        settings.SESSION_ALGORITHM,
    )
    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=token,
        max_age=settings.SESSION_MAX_AGE_SECONDS,
        httponly=True,
        secure=settings.is_production,
        samesite="lax",
        path="/",
    )


# -------------------------------------------
# Login
# -------------------------------------------
@router.post("/login", response_model=AuthResponse)
def login(
    body: LoginRequest,
    request: Request,
    response: Response,
    store: RecordStore = Depends(get_store),
    settings: Settings = Depends(get_settings),
    limiter: RateLimitStore = Depends(get_login_limiter),
):
    ip = client_ip(request)
    if not limiter.hit(ip):
        logger.warning("login_rate_limited", client_ip=ip)
        raise HTTPException(
            status_code=429,
            detail="Too many login attempts. Please try again later.",
            headers={"Retry-After": str(limiter.retry_after(ip))},
        )

    try:
        user = authenticate(
            store,
            body.email,
            body.password,
            migration_until=settings.MIGRATION_MODE_UNTIL,
            ip_address=ip,
        )
    except HTTPException:
        logger.info("login_failed", client_ip=ip)
        raise

    limiter.reset(ip)
    _set_session_cookie(response, settings, user)
    logger.info("login_succeeded", user_id=user.get("id"))
    return AuthResponse(user=UserOut(**public_user(user)), message="Login successful")


# -------------------------------------------
# Register
# -------------------------------------------
@router.post("/register", response_model=AuthResponse, status_code=201)
def register(
    body: RegisterRequest,
    response: Response,
    store: RecordStore = Depends(get_store),
    settings: Settings = Depends(get_settings),
):
    user = register_user(store, body.name, body.email, body.password)
    _set_session_cookie(response, settings, user)
    return AuthResponse(user=UserOut(**public_user(user)), message="Registration successful")


# -------------------------------------------
# Logout
# -------------------------------------------
@router.post("/logout")
def logout(response: Response, settings: Settings = Depends(get_settings)):
    response.delete_cookie(settings.SESSION_COOKIE_NAME, path="/")
    return {"success": True, "message": "Logged out"}


@router.get("/me")
def me(current_user: dict = Depends(get_current_user)):
    return {
        "success": True,
        "user": {
            "id": current_user.get("sub"),
            "email": current_user.get("email"),
            "role": current_user.get("role"),
        },
    }

