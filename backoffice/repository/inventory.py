import logging
from datetime import datetime, timezone
from typing import Dict, Any, List, Optional

from sqlalchemy import delete, desc, insert, update
from sqlalchemy.engine import Connection

from backoffice.sql import inventory, inventory_select

LOG = logging.getLogger("repo")

def _now() -> datetime:
    return datetime.now(timezone.utc)

def list_items(conn: Connection) -> List[Dict[str, Any]]:
    stmt = inventory_select().order_by(desc(inventory.c.created_at), desc(inventory.c.id))
    return [dict(r) for r in conn.execute(stmt).mappings().all()]

def list_favorites(conn: Connection) -> List[Dict[str, Any]]:
    stmt = (
        inventory_select()
        .where(inventory.c.is_favorite.is_(True))
        .order_by(desc(inventory.c.last_updated), desc(inventory.c.id))
    )
    return [dict(r) for r in conn.execute(stmt).mappings().all()]

def get_item(conn: Connection, item_id: int) -> Dict[str, Any]:
    """
    Returns one inventory item as a dict,
    or {} if not found.
    """
    row = conn.execute(inventory_select().where(inventory.c.id == item_id)).mappings().first()
    return dict(row) if row else {}

def create_item(conn: Connection, data: Dict[str, Any]) -> Dict[str, Any]:
    now = _now()
    values = {**data, "created_at": now, "updated_at": now, "last_updated": now}
    with conn.begin():
        item_id = conn.execute(insert(inventory).values(**values)).inserted_primary_key[0]
        item = get_item(conn, item_id)
    LOG.info("inventory item %s created", item_id)
    return item

def update_item(conn: Connection, item_id: int, changes: Dict[str, Any]) -> Optional[bool]:
    """
    Apply `changes` to one item.
    Returns None when the item does not exist, False when nothing differs.
    """
    with conn.begin():
        current = get_item(conn, item_id)
        if not current:
            return None
        diff = {k: v for k, v in changes.items() if current.get(k) != v}
        if not diff:
            return False
        now = _now()
        conn.execute(
            update(inventory)
            .where(inventory.c.id == item_id)
            .values(**diff, updated_at=now, last_updated=now)
        )
    LOG.info("inventory item %s updated: %s", item_id, sorted(diff))
    return True

def set_favorite(conn: Connection, item_id: int, is_favorite: bool) -> bool:
    with conn.begin():
        res = conn.execute(
            update(inventory)
            .where(inventory.c.id == item_id)
            .values(is_favorite=is_favorite, last_updated=_now())
        )
    return res.rowcount > 0

def delete_item(conn: Connection, item_id: int) -> bool:
    with conn.begin():
        res = conn.execute(delete(inventory).where(inventory.c.id == item_id))
    if res.rowcount:
        LOG.info("inventory item %s deleted", item_id)
    return res.rowcount > 0
