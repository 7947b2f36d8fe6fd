import logging
from datetime import datetime, timezone
from typing import Dict, Any, List

from sqlalchemy import desc, insert, select, update
from sqlalchemy.engine import Connection

from backoffice.repository.users import ADMIN_ROLE
from backoffice.sql import notifications, notification_select, users

LOG = logging.getLogger("repo")

def _row(user_id: str, message: str, type_: str, now: datetime) -> Dict[str, Any]:
    return {
        "user_id": str(user_id),
        "message": message,
        "type": type_ or "info",
        "read": False,
        "created_at": now,
        "updated_at": now,
    }

def unread_for_user(conn: Connection, user_id: str) -> List[Dict[str, Any]]:
    stmt = (
        notification_select()
        .where(notifications.c.user_id == user_id, notifications.c.read.is_(False))
        .order_by(desc(notifications.c.created_at), desc(notifications.c.id))
    )
    return [dict(r) for r in conn.execute(stmt).mappings().all()]

def notify_user(conn: Connection, user_id: str, message: str, type_: str = "info") -> None:
    with conn.begin():
        conn.execute(insert(notifications).values(**_row(user_id, message, type_, datetime.now(timezone.utc))))

def notify_all_users(conn: Connection, message: str, type_: str = "info") -> int:
    """
    One notification per non-administrator user.
    Returns the number of users notified.
    """
    now = datetime.now(timezone.utc)
    with conn.begin():
        user_ids = conn.execute(
            select(users.c.id).where(users.c.role.is_distinct_from(ADMIN_ROLE))
        ).scalars().all()
        if user_ids:
            conn.execute(insert(notifications), [_row(uid, message, type_, now) for uid in user_ids])
    LOG.info("notification fanned out to %d users", len(user_ids))
    return len(user_ids)

def mark_read(conn: Connection, notification_id: int) -> bool:
    with conn.begin():
        res = conn.execute(
            update(notifications)
            .where(notifications.c.id == notification_id)
            .values(read=True, updated_at=datetime.now(timezone.utc))
        )
    return res.rowcount > 0
