from typing import Any, Dict, List, Optional
from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

# ---------- MLS ----------

class ListingQueryParams(BaseModel):
    """
    Inbound listing search. Everything is kept as the raw string the caller sent;
    the query translator decides what is usable and silently drops the rest.
    """
    model_config = ConfigDict(populate_by_name=True, coerce_numbers_to_str=True)

    page: Optional[str] = None
    search: Optional[str] = None
    price_min: Optional[str] = Field(None, alias="priceMin")
    price_max: Optional[str] = Field(None, alias="priceMax")
    beds: Optional[str] = None
    baths: Optional[str] = None
    property_type: Optional[str] = Field(None, alias="propertyType")
    status: Optional[str] = None
    sort: Optional[str] = None

class ListingPage(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    properties: List[Any] = Field(..., description="Raw upstream listing records")
    total: int = Field(..., description="Upstream count, or the number of returned records")
    page: int
    page_size: int = Field(..., alias="pageSize")
    total_pages: int = Field(..., alias="totalPages")

class ErrorResponse(BaseModel):
    error: str
    details: Optional[Any] = None

# ---------- Inventory ----------

class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

class InventoryFields(_CamelModel):
    address: Optional[str] = None
    property_type: Optional[str] = None
    status: Optional[str] = None
    bedrooms: Optional[int] = None
    bathrooms: Optional[float] = None
    price: Optional[float] = None
    area: Optional[float] = None
    year_built: Optional[int] = None
    description: Optional[str] = None
    features: Optional[List[str]] = Field(default_factory=list)
    main_image: Optional[str] = None
    is_favorite: bool = False

class InventoryItem(InventoryFields):
    id: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    last_updated: Optional[datetime] = None

class InventoryUpdate(_CamelModel):
    # kept loose so a malformed id is answered with 400, not a validation error
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True,
                              coerce_numbers_to_str=True)

    id: Optional[str] = None
    address: Optional[str] = None
    property_type: Optional[str] = None
    status: Optional[str] = None
    bedrooms: Optional[int] = None
    bathrooms: Optional[float] = None
    price: Optional[float] = None
    area: Optional[float] = None
    year_built: Optional[int] = None
    description: Optional[str] = None
    features: Optional[List[str]] = None
    main_image: Optional[str] = None
    is_favorite: Optional[bool] = None

class FavoriteUpdate(_CamelModel):
    is_favorite: bool

class InventoryCreated(BaseModel):
    success: bool = True
    item: InventoryItem

class Ack(BaseModel):
    success: bool = True
    message: Optional[str] = None

# ---------- Notifications ----------

class Notification(_CamelModel):
    id: int
    user_id: str
    message: str
    type: str = "info"
    read: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

class NotificationCreate(_CamelModel):
    message: str
    type: str = "info"
    user_id: Optional[str] = None
    send_to_all_users: bool = False

class NotificationRead(_CamelModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True,
                              coerce_numbers_to_str=True)

    notification_id: Optional[str] = None

# ---------- Users ----------

class PermissionsUpdate(BaseModel):
    # keys left out (or null) fall back to the stored value, then to False
    dashboard: Optional[bool] = None
    leads: Optional[bool] = None
    calendar: Optional[bool] = None
    email: Optional[bool] = None
    settings: Optional[bool] = None
    inventory: Optional[bool] = None
    favorites: Optional[bool] = None
    mls: Optional[bool] = None

class UserCreate(_CamelModel):
    # required fields are checked by the router so a gap is a 400, not a 422
    name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None
    role: Optional[str] = None
    status: Optional[str] = None
    permissions: Optional[PermissionsUpdate] = None

class UserChanges(_CamelModel):
    name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None
    role: Optional[str] = None
    status: Optional[str] = None
    permissions: Optional[PermissionsUpdate] = None

class UserUpdate(UserChanges):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True,
                              coerce_numbers_to_str=True)

    id: Optional[str] = None

class User(_CamelModel):
    id: int
    name: Optional[str] = None
    email: Optional[str] = None
    role: Optional[str] = None
    status: Optional[str] = None
    permissions: Dict[str, bool]
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

class UserSaved(BaseModel):
    success: bool = True
    user: User
