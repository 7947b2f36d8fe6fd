# backoffice/routers/notifications.py
from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.engine import Connection

from backoffice.deps import get_conn
from backoffice.models import Ack, Notification, NotificationCreate, NotificationRead
from backoffice.repository import notifications as repo

router = APIRouter(tags=["notifications"])

@router.get("/notifications", response_model=List[Notification])
def list_unread(user_id: Optional[str] = Query(None, alias="userId"), conn: Connection = Depends(get_conn)):
    if not user_id:
        raise HTTPException(status_code=400, detail="User ID is required")
    return [Notification(**row) for row in repo.unread_for_user(conn, user_id)]

@router.post("/notifications", response_model=Ack)
def send_notification(body: NotificationCreate, conn: Connection = Depends(get_conn)):
    if body.send_to_all_users:
        count = repo.notify_all_users(conn, body.message, body.type)
        return Ack(message=f"Notification sent to {count} users")

    if body.user_id:
        repo.notify_user(conn, body.user_id, body.message, body.type)
        return Ack(message="Notification sent successfully")

    raise HTTPException(status_code=400, detail="Invalid request")

@router.put("/notifications", response_model=Ack)
def mark_read(body: NotificationRead, conn: Connection = Depends(get_conn)):
    if not body.notification_id:
        raise HTTPException(status_code=400, detail="Notification ID is required")
    try:
        notification_id = int(body.notification_id)
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid notification ID")

    if not repo.mark_read(conn, notification_id):
        raise HTTPException(status_code=404, detail="Notification not found")
    return Ack(message="Notification marked as read")
