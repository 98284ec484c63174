"""Public XP leaderboard."""
import html

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from zabaan.models.user import User

DEFAULT_LIMIT = 10
MAX_LIMIT = 100
MAX_NAME_LENGTH = 50


def sanitize_display_name(name: str | None) -> str:
    if not name or not name.strip():
        return "Anonymous"
    return html.escape(name, quote=True).strip()[:MAX_NAME_LENGTH]


async def get_leaderboard(db: AsyncSession, limit: int = DEFAULT_LIMIT, offset: int = 0) -> dict:
    # Fetch one extra row to learn whether another page exists
    result = await db.execute(
        select(User.id, User.display_name, User.total_xp)
        .where(User.total_xp > 0)
        .order_by(User.total_xp.desc(), User.created_at.asc(), User.id.asc())
        .offset(offset)
        .limit(limit + 1)
    )
    rows = result.all()
    has_more = len(rows) > limit
    rows = rows[:limit]

    entries = [
        {
            "rank": offset + i + 1,
            "user_id": user_id,
            "display_name": sanitize_display_name(display_name),
            "total_xp": total_xp,
        }
        for i, (user_id, display_name, total_xp) in enumerate(rows)
    ]
    return {
        "top": entries,
        "pagination": {
            "limit": limit,
            "offset": offset,
            "next_offset": offset + limit if has_more else None,
            "has_more": has_more,
        },
    }
