# backoffice/routers/users.py
from typing import Any, Dict, List, Optional
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.engine import Connection

from backoffice.deps import get_conn
from backoffice.models import Ack, User, UserChanges, UserCreate, UserSaved, UserUpdate
from backoffice.repository import users as repo

router = APIRouter(tags=["users"])

def _user_id(raw: Optional[str]) -> int:
    try:
        user_id = int(str(raw))
    except (TypeError, ValueError):
        raise HTTPException(status_code=400, detail="Invalid user ID")
    if user_id < 1:
        raise HTTPException(status_code=400, detail="Invalid user ID")
    return user_id

def _apply(conn: Connection, user_id: int, changes: Dict[str, Any]) -> Dict[str, Any]:
    try:
        row = repo.update_user(conn, user_id, changes)
    except repo.EmailTaken:
        raise HTTPException(status_code=400, detail="Email already exists")
    if row is None:
        raise HTTPException(status_code=404, detail="User not found")
    return row

@router.get("/users", response_model=List[User])
def list_users(conn: Connection = Depends(get_conn)):
    return [User(**row) for row in repo.list_users(conn)]

@router.post("/users", response_model=UserSaved)
def create_user(body: UserCreate, conn: Connection = Depends(get_conn)):
    if not (body.email and body.password and body.name):
        raise HTTPException(status_code=400, detail="Missing required fields")
    try:
        row = repo.create_user(conn, body.model_dump())
    except repo.EmailTaken:
        raise HTTPException(status_code=400, detail="Email already exists")
    return UserSaved(user=User(**row))

@router.put("/users", response_model=UserSaved)
def update_user(body: UserUpdate, conn: Connection = Depends(get_conn)):
    user_id = _user_id(body.id)
    row = _apply(conn, user_id, body.model_dump(exclude={"id"}, exclude_unset=True))
    return UserSaved(user=User(**row))

@router.get("/users/{user_id}", response_model=User)
def get_user(user_id: str, conn: Connection = Depends(get_conn)):
    row = repo.get_user(conn, _user_id(user_id))
    if not row:
        raise HTTPException(status_code=404, detail="User not found")
    return User(**row)

@router.patch("/users/{user_id}", response_model=Ack)
def patch_user(user_id: str, body: UserChanges, conn: Connection = Depends(get_conn)):
    _apply(conn, _user_id(user_id), body.model_dump(exclude_unset=True))
    return Ack(message="User updated successfully")

@router.delete("/users/{user_id}", response_model=Ack)
def delete_user(user_id: str, conn: Connection = Depends(get_conn)):
    if not repo.delete_user(conn, _user_id(user_id)):
        raise HTTPException(status_code=404, detail="User not found")
    return Ack()
