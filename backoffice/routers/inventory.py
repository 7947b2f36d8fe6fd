# backoffice/routers/inventory.py
from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.engine import Connection

from backoffice.deps import get_conn
from backoffice.models import (
    Ack, FavoriteUpdate, InventoryCreated, InventoryFields, InventoryItem, InventoryUpdate,
)
from backoffice.repository import inventory as repo

router = APIRouter(tags=["inventory"])

def _item_id(raw: Optional[str]) -> int:
    try:
        item_id = int(str(raw))
    except (TypeError, ValueError):
        raise HTTPException(status_code=400, detail="Invalid item ID")
    if item_id < 1:
        raise HTTPException(status_code=400, detail="Invalid item ID")
    return item_id

@router.get("/inventory", response_model=List[InventoryItem])
def list_inventory(conn: Connection = Depends(get_conn)):
    return [InventoryItem(**row) for row in repo.list_items(conn)]

@router.post("/inventory", response_model=InventoryCreated)
def create_inventory_item(body: InventoryFields, conn: Connection = Depends(get_conn)):
    row = repo.create_item(conn, body.model_dump())
    return InventoryCreated(item=InventoryItem(**row))

@router.put("/inventory", response_model=Ack)
def update_inventory_item(body: InventoryUpdate, conn: Connection = Depends(get_conn)):
    item_id = _item_id(body.id)
    changes = body.model_dump(exclude={"id"}, exclude_unset=True)

    updated = repo.update_item(conn, item_id, changes)
    if updated is None:
        raise HTTPException(status_code=404, detail="Item not found")
    if not updated:
        raise HTTPException(status_code=400, detail="No changes were made to the item")
    return Ack(message="Item updated successfully")

@router.get("/inventory/{item_id}", response_model=InventoryItem)
def get_inventory_item(item_id: str, conn: Connection = Depends(get_conn)):
    row = repo.get_item(conn, _item_id(item_id))
    if not row:
        raise HTTPException(status_code=404, detail="Item not found")
    return InventoryItem(**row)

@router.delete("/inventory/{item_id}", response_model=Ack)
def delete_inventory_item(item_id: str, conn: Connection = Depends(get_conn)):
    if not repo.delete_item(conn, _item_id(item_id)):
        raise HTTPException(status_code=404, detail="Item not found")
    return Ack()

@router.put("/inventory/{item_id}/favorite", response_model=Ack)
def set_inventory_favorite(item_id: str, body: FavoriteUpdate, conn: Connection = Depends(get_conn)):
    if not repo.set_favorite(conn, _item_id(item_id), body.is_favorite):
        raise HTTPException(status_code=404, detail="Item not found")
    return Ack()

@router.get("/favorites", response_model=List[InventoryItem])
def list_favorites(conn: Connection = Depends(get_conn)):
    return [InventoryItem(**row) for row in repo.list_favorites(conn)]
