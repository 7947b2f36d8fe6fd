from sqlalchemy import MetaData, Table, Column, Integer, String, Numeric, Boolean, DateTime, JSON, Text
from sqlalchemy.sql import select

metadata = MetaData()

# ---------- Tables ----------
inventory = Table(
    "inventory", metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("address", String),
    Column("property_type", String),
    Column("status", String),
    Column("bedrooms", Integer),
    Column("bathrooms", Numeric(asdecimal=False)),
    Column("price", Numeric(asdecimal=False)),
    Column("area", Numeric(asdecimal=False)),
    Column("year_built", Integer),
    Column("description", Text),
    Column("features", JSON),
    Column("main_image", String),
    Column("is_favorite", Boolean, nullable=False, default=False),
    Column("created_at", DateTime),
    Column("updated_at", DateTime),
    Column("last_updated", DateTime),
)

users = Table(
    "users", metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("name", String),
    Column("email", String, index=True),
    Column("password_hash", String),
    Column("role", String),     # "Administrator" | "User" | ...
    Column("status", String),
    Column("permissions", JSON),
    Column("created_at", DateTime),
    Column("updated_at", DateTime),
)

notifications = Table(
    "notifications", metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("user_id", String, index=True),
    Column("message", Text, nullable=False),
    Column("type", String, nullable=False, default="info"),
    Column("read", Boolean, nullable=False, default=False),
    Column("created_at", DateTime),
    Column("updated_at", DateTime),
)

# ---------- Column lists reused across queries ----------

INVENTORY_COLS = [c for c in inventory.c]

NOTIFICATION_COLS = [c for c in notifications.c]

# never selected: password_hash
USER_COLS = [c for c in users.c if c.name != "password_hash"]

# ---------- Public selectors ----------

def inventory_select():
    return select(*INVENTORY_COLS).select_from(inventory)

def notification_select():
    return select(*NOTIFICATION_COLS).select_from(notifications)

def user_select():
    return select(*USER_COLS).select_from(users)
