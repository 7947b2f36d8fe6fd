import logging
from datetime import datetime, timezone
from typing import Dict, Any, List, Optional

from sqlalchemy import delete, func, insert, select, update
from sqlalchemy.engine import Connection

from backoffice.security import hash_password
from backoffice.sql import users, user_select

LOG = logging.getLogger("repo")

ADMIN_ROLE = "Administrator"
DEFAULT_ROLE = "User"
DEFAULT_STATUS = "active"

PERMISSION_KEYS = ("dashboard", "leads", "calendar", "email", "settings", "inventory", "favorites", "mls")
DEFAULT_PERMISSIONS = {k: False for k in PERMISSION_KEYS}


class EmailTaken(Exception):
    """Another user already has this email (compared case-insensitively)."""


def normalize_role(role: Optional[str]) -> str:
    if not role:
        return DEFAULT_ROLE
    role = role.lower()
    if role in ("admin", "administrator"):
        return ADMIN_ROLE
    return role[:1].upper() + role[1:]

def admin_permissions() -> Dict[str, bool]:
    return {k: True for k in PERMISSION_KEYS}

def merge_permissions(
    requested: Optional[Dict[str, Any]],
    existing: Optional[Dict[str, Any]] = None,
) -> Dict[str, bool]:
    """Key by key: the requested value, else the stored value, else the default."""
    requested = requested or {}
    existing = existing or {}
    merged = {}
    for key in PERMISSION_KEYS:
        if requested.get(key) is not None:
            merged[key] = bool(requested[key])
        elif existing.get(key) is not None:
            merged[key] = bool(existing[key])
        else:
            merged[key] = DEFAULT_PERMISSIONS[key]
    return merged

def _public(row) -> Dict[str, Any]:
    user = dict(row)
    user["permissions"] = merge_permissions(None, user.get("permissions"))
    return user

def _email_taken(conn: Connection, email: str, except_id: Optional[int] = None) -> bool:
    stmt = select(users.c.id).where(func.lower(users.c.email) == email.lower())
    if except_id is not None:
        stmt = stmt.where(users.c.id != except_id)
    return conn.execute(stmt.limit(1)).first() is not None

def list_users(conn: Connection) -> List[Dict[str, Any]]:
    return [_public(r) for r in conn.execute(user_select().order_by(users.c.id)).mappings().all()]

def get_user(conn: Connection, user_id: int) -> Dict[str, Any]:
    """
    Returns one user (never the password hash) as a dict,
    or {} if not found.
    """
    row = conn.execute(user_select().where(users.c.id == user_id)).mappings().first()
    return _public(row) if row else {}

def create_user(conn: Connection, data: Dict[str, Any]) -> Dict[str, Any]:
    """
    Insert a user from name/email/password plus optional role, status and permissions.
    Raises EmailTaken when the email is already registered.
    """
    role = normalize_role(data.get("role"))
    if role == ADMIN_ROLE:
        permissions = admin_permissions()
    else:
        permissions = merge_permissions(data.get("permissions"))

    now = datetime.now(timezone.utc)
    values = {
        "name": data["name"],
        "email": data["email"],
        "password_hash": hash_password(data["password"]),
        "role": role,
        "status": data.get("status") or DEFAULT_STATUS,
        "permissions": permissions,
        "created_at": now,
        "updated_at": now,
    }
    with conn.begin():
        if _email_taken(conn, data["email"]):
            raise EmailTaken(data["email"])
        user_id = conn.execute(insert(users).values(**values)).inserted_primary_key[0]
        user = get_user(conn, user_id)
    LOG.info("user %s created with role %s", user_id, role)
    return user

def update_user(conn: Connection, user_id: int, changes: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    """
    Apply a partial update. A blank password keeps the stored hash; permissions
    are merged over the stored ones and an Administrator always holds all of them.
    Returns None when the user does not exist. Raises EmailTaken.
    """
    changes = {k: v for k, v in changes.items() if v is not None}
    password = changes.pop("password", None)

    with conn.begin():
        current = conn.execute(
            select(users.c.role, users.c.permissions).where(users.c.id == user_id)
        ).mappings().first()
        if current is None:
            return None
        if changes.get("email") and _email_taken(conn, changes["email"], except_id=user_id):
            raise EmailTaken(changes["email"])

        if password:
            changes["password_hash"] = hash_password(password)
        if changes.get("role"):
            changes["role"] = normalize_role(changes["role"])
        else:
            changes.pop("role", None)

        role = changes.get("role", current["role"])
        if role == ADMIN_ROLE:
            changes["permissions"] = admin_permissions()
        elif "permissions" in changes:
            changes["permissions"] = merge_permissions(changes["permissions"], current["permissions"])

        conn.execute(
            update(users)
            .where(users.c.id == user_id)
            .values(**changes, updated_at=datetime.now(timezone.utc))
        )
        user = get_user(conn, user_id)
    LOG.info("user %s updated: %s", user_id, sorted(changes))
    return user

def delete_user(conn: Connection, user_id: int) -> bool:
    with conn.begin():
        res = conn.execute(delete(users).where(users.c.id == user_id))
    if res.rowcount:
        LOG.info("user %s deleted", user_id)
    return res.rowcount > 0
