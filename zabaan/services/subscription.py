"""
Premium subscriptions through Stripe.

Checkout creates a subscription-mode session; Stripe then reports the result
through webhooks, which keep ``user_subscriptions`` in sync. Stripe's SDK is
blocking, so calls run in the threadpool.
"""
import logging
from datetime import datetime, timezone

import stripe
from fastapi.concurrency import run_in_threadpool
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from zabaan.core.clock import as_utc, utcnow
from zabaan.core.config import get_settings, is_valid_price_id
from zabaan.core.errors import AppError, ExternalServiceError, NotFoundError, ValidationError
from zabaan.models.subscription import UserSubscription
from zabaan.models.user import User

logger = logging.getLogger(__name__)

STATUS_ACTIVE = "active"
STATUS_PAST_DUE = "past_due"
STATUS_CANCELED = "canceled"


class BillingDisabledError(AppError):
    def __init__(self):
        super().__init__(message="Billing is not configured", code="BILLING_DISABLED", status_code=503)


def _client():
    settings = get_settings()
    if not settings.billing_enabled or not settings.stripe_secret_key:
        raise BillingDisabledError()
    stripe.api_key = settings.stripe_secret_key
    return stripe


def is_premium_subscription(sub: UserSubscription | None, now: datetime | None = None) -> bool:
    if sub is None or sub.status != STATUS_ACTIVE:
        return False
    period_end = as_utc(sub.current_period_end)
    return period_end is None or period_end > (now or utcnow())


async def get_subscription(db: AsyncSession, user_id: int) -> UserSubscription | None:
    result = await db.execute(select(UserSubscription).where(UserSubscription.user_id == user_id))
    return result.scalar_one_or_none()


async def has_premium(db: AsyncSession, user_id: int, now: datetime | None = None) -> bool:
    return is_premium_subscription(await get_subscription(db, user_id), now)


async def create_checkout_session(user: User, origin: str) -> str:
    """Start a premium checkout and return the hosted page URL."""
    client = _client()
    price_id = get_settings().stripe_price_id
    if not is_valid_price_id(price_id):
        logger.error("Configured price id is malformed")
        raise AppError(message="Server configuration error", code="CONFIG_ERROR", status_code=500)

    origin = origin.rstrip("/")
    try:
        session = await run_in_threadpool(
            client.checkout.Session.create,
            mode="subscription",
            line_items=[{"price": price_id, "quantity": 1}],
            success_url=f"{origin}/billing/success?session_id={{CHECKOUT_SESSION_ID}}",
            cancel_url=f"{origin}/billing/canceled",
            allow_promotion_codes=True,
            customer_email=user.email,
            metadata={"user_id": str(user.id)},
        )
    except stripe.StripeError as exc:
        logger.error("Checkout session failed for user %s: %s", user.id, exc)
        raise ExternalServiceError("Checkout failed", service="stripe") from exc
    return session["url"]


def construct_event(payload: bytes, signature: str | None):
    """Verify the webhook signature and parse the event."""
    if not signature:
        raise ValidationError("No signature")
    client = _client()
    try:
        return client.Webhook.construct_event(payload, signature, get_settings().stripe_webhook_secret)
    except (ValueError, stripe.SignatureVerificationError) as exc:
        logger.warning("Webhook signature check failed: %s", exc)
        raise ValidationError(f"Webhook Error: {exc}") from exc


def _timestamp(value) -> datetime | None:
    if not value:
        return None
    return datetime.fromtimestamp(int(value), tz=timezone.utc)


def _period_end(sub) -> datetime | None:
    end = sub.get("current_period_end")
    if end is None:
        items = (sub.get("items") or {}).get("data") or []
        if items:
            end = items[0].get("current_period_end")
    return _timestamp(end)


async def _retrieve_subscription(subscription_id: str):
    client = _client()
    try:
        return await run_in_threadpool(client.Subscription.retrieve, subscription_id)
    except stripe.StripeError as exc:
        logger.error("Could not retrieve subscription %s: %s", subscription_id, exc)
        raise ExternalServiceError("Could not load subscription", service="stripe") from exc


async def _find_user(db: AsyncSession, user_id=None, email: str | None = None) -> User | None:
    if user_id is not None and str(user_id).isdigit():
        result = await db.execute(select(User).where(User.id == int(user_id)))
        user = result.scalar_one_or_none()
        if user is not None:
            return user
    if email:
        result = await db.execute(select(User).where(User.email == email.strip().lower()))
        return result.scalar_one_or_none()
    return None


async def _by_stripe_id(db: AsyncSession, subscription_id: str) -> UserSubscription | None:
    result = await db.execute(
        select(UserSubscription).where(UserSubscription.stripe_subscription_id == subscription_id)
    )
    return result.scalar_one_or_none()


async def _checkout_completed(db: AsyncSession, session) -> dict:
    email = session.get("customer_email") or (session.get("customer_details") or {}).get("email")
    user = await _find_user(db, (session.get("metadata") or {}).get("user_id"), email)
    if user is None:
        raise NotFoundError("User not found", resource="user")

    subscription_id = session.get("subscription")
    if not subscription_id:
        raise ValidationError("No subscription ID")
    sub = await _retrieve_subscription(subscription_id)

    row = await get_subscription(db, user.id)
    if row is None:
        row = UserSubscription(user_id=user.id)
        db.add(row)
    row.stripe_customer_id = session.get("customer")
    row.stripe_subscription_id = subscription_id
    row.plan_type = "premium"
    row.status = sub.get("status") or STATUS_ACTIVE
    row.current_period_end = _period_end(sub)
    row.cancel_at_period_end = bool(sub.get("cancel_at_period_end"))
    await db.commit()
    logger.info("Premium subscription %s recorded for user %s", subscription_id, user.id)
    return {"user_id": user.id, "status": row.status}


async def _subscription_updated(db: AsyncSession, sub) -> dict:
    row = await _by_stripe_id(db, sub["id"])
    if row is None:
        logger.warning("Webhook for unknown subscription %s", sub["id"])
        return {"ignored": True}
    row.status = sub.get("status") or row.status
    row.current_period_end = _period_end(sub) or row.current_period_end
    row.cancel_at_period_end = bool(sub.get("cancel_at_period_end"))
    await db.commit()
    return {"user_id": row.user_id, "status": row.status}


async def _set_status(db: AsyncSession, subscription_id: str | None, status: str) -> dict:
    if not subscription_id:
        return {"ignored": True}
    row = await _by_stripe_id(db, subscription_id)
    if row is None:
        logger.warning("Webhook for unknown subscription %s", subscription_id)
        return {"ignored": True}
    row.status = status
    await db.commit()
    return {"user_id": row.user_id, "status": status}


async def _payment_succeeded(db: AsyncSession, invoice) -> dict:
    subscription_id = invoice.get("subscription")
    if not subscription_id:
        return {"ignored": True}
    sub = await _retrieve_subscription(subscription_id)
    row = await _by_stripe_id(db, subscription_id)
    if row is None:
        return {"ignored": True}
    row.status = sub.get("status") or STATUS_ACTIVE
    row.current_period_end = _period_end(sub) or row.current_period_end
    await db.commit()
    return {"user_id": row.user_id, "status": row.status}


async def handle_webhook_event(db: AsyncSession, event) -> dict:
    """Apply one verified Stripe event to the subscription table."""
    event_type = event["type"]
    obj = event["data"]["object"]
    logger.info("Stripe webhook: %s", event_type)

    if event_type == "checkout.session.completed":
        result = await _checkout_completed(db, obj)
    elif event_type == "customer.subscription.updated":
        result = await _subscription_updated(db, obj)
    elif event_type == "customer.subscription.deleted":
        result = await _set_status(db, obj.get("id"), STATUS_CANCELED)
    elif event_type == "invoice.payment_failed":
        result = await _set_status(db, obj.get("subscription"), STATUS_PAST_DUE)
    elif event_type == "invoice.payment_succeeded":
        result = await _payment_succeeded(db, obj)
    else:
        result = {"ignored": True}
    return {"received": True, "type": event_type, **result}
