"""Auth routes: register, login, logout and the caller's profile."""
import logging
import re
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from fastapi import APIRouter, Response
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from zabaan.core.config import get_settings
from zabaan.core.errors import AuthenticationError, ValidationError
from zabaan.core.security import create_access_token, create_session_token, hash_password, verify_password
from zabaan.models.user import User
from zabaan.routers.deps import CurrentUser, DbSession
from zabaan.schemas.auth import LoginSchema, ProfileUpdateSchema, RegisterSchema, TokenSchema, UserOutSchema

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])
settings = get_settings()

EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def _normalize_email(email: str | None) -> str:
    return (email or "").strip().lower()


def _validate_timezone(name: str | None) -> str | None:
    if name is None:
        return None
    try:
        ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise ValidationError("Unknown timezone", errors={"timezone": name}) from exc
    return name


def _set_auth_cookie(response: Response, user_id: int) -> None:
    response.set_cookie(
        key=settings.auth_cookie_name,
        value=create_session_token(user_id),
        max_age=settings.auth_cookie_max_age,
        httponly=True,
        samesite="lax",
        path="/",
    )


@router.post("/register", response_model=TokenSchema, status_code=201)
async def register(body: RegisterSchema, response: Response, db: DbSession):
    """Create an account and sign the caller in."""
    email = _normalize_email(body.email)
    if not EMAIL_RE.match(email):
        raise ValidationError("Invalid email", errors={"email": "invalid"})

    existing = await db.execute(select(User.id).where(User.email == email))
    if existing.scalar_one_or_none() is not None:
        raise ValidationError("Email already registered", errors={"email": "exists"})

    user = User(
        email=email,
        hashed_password=hash_password(body.password),
        display_name=(body.display_name or "").strip() or None,
        timezone=_validate_timezone(body.timezone),
        total_xp=0,
        streak_count=0,
        daily_goal_xp=50,
    )
    db.add(user)
    try:
        await db.commit()
    except IntegrityError as exc:
        await db.rollback()
        raise ValidationError("Email already registered", errors={"email": "exists"}) from exc
    await db.refresh(user)
    logger.info("Registered user %s", user.id)

    _set_auth_cookie(response, user.id)
    return TokenSchema(access_token=create_access_token(user.id), user=UserOutSchema.model_validate(user))


@router.post("/login", response_model=TokenSchema)
async def login(body: LoginSchema, response: Response, db: DbSession):
    """Check credentials; sets the auth cookie and returns a bearer token."""
    result = await db.execute(select(User).where(User.email == _normalize_email(body.email)))
    user = result.scalar_one_or_none()
    if not user or not verify_password(body.password, user.hashed_password):
        raise AuthenticationError("Invalid email or password")

    _set_auth_cookie(response, user.id)
    return TokenSchema(access_token=create_access_token(user.id), user=UserOutSchema.model_validate(user))


@router.post("/logout")
async def logout(response: Response):
    response.delete_cookie(settings.auth_cookie_name, path="/")
    return {"success": True}


@router.get("/me", response_model=UserOutSchema)
async def me(user: CurrentUser):
    return user


@router.patch("/me", response_model=UserOutSchema)
async def update_me(body: ProfileUpdateSchema, user: CurrentUser, db: DbSession):
    if body.display_name is not None:
        user.display_name = body.display_name.strip()
    if body.timezone is not None:
        user.timezone = _validate_timezone(body.timezone)
    await db.commit()
    return user
