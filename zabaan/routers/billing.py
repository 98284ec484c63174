"""Premium checkout, Stripe webhooks and access checks."""
from typing import Annotated

from fastapi import APIRouter, Depends, Header, HTTPException, Query, Request

from zabaan.core.rate_limit import CHECKOUT_LIMIT, MODULE_ACCESS_LIMIT, PREMIUM_CHECK_LIMIT
from zabaan.curriculum import is_valid_module_id
from zabaan.routers.deps import CurrentUser, DbSession
from zabaan.services import subscription as billing
from zabaan.services.module_access import can_access_module

router = APIRouter(prefix="/api", tags=["billing"])


def _origin(request: Request) -> str:
    return request.headers.get("origin") or str(request.base_url)


@router.post("/checkout", dependencies=[Depends(CHECKOUT_LIMIT)])
async def checkout(request: Request, user: CurrentUser):
    """Create a Stripe checkout session and return its URL."""
    url = await billing.create_checkout_session(user, _origin(request))
    return {"url": url}


@router.post("/webhooks/stripe")
async def stripe_webhook(
    request: Request,
    db: DbSession,
    stripe_signature: Annotated[str | None, Header()] = None,
):
    payload = await request.body()
    event = billing.construct_event(payload, stripe_signature)
    return await billing.handle_webhook_event(db, event)


@router.get("/check-premium", dependencies=[Depends(PREMIUM_CHECK_LIMIT)])
async def check_premium(user: CurrentUser, db: DbSession):
    sub = await billing.get_subscription(db, user.id)
    return {
        "has_premium": billing.is_premium_subscription(sub),
        "status": sub.status if sub else None,
        "cancel_at_period_end": bool(sub and sub.cancel_at_period_end),
    }


@router.get("/check-module-access", dependencies=[Depends(MODULE_ACCESS_LIMIT)])
async def check_module_access(
    user: CurrentUser,
    db: DbSession,
    module_id: Annotated[str, Query(alias="moduleId")],
):
    if not is_valid_module_id(module_id):
        raise HTTPException(status_code=400, detail="Invalid module id")
    return await can_access_module(db, user.id, module_id)
