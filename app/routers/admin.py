# app/routers/admin.py

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError

from app.database import get_db
from app.core.auth import get_admin_user
from app.core.hashing import hash_password
from app.models.users import User
from app.schemas.user import UserCreate, UserResponse, RoleUpdate


router = APIRouter(prefix="/admin", tags=["Admin"])


# =========================================================
# USER MANAGEMENT
# =========================================================

@router.get("/users", response_model=list[UserResponse])
def list_users(
    db: Session = Depends(get_db),
    admin = Depends(get_admin_user),
):
    return db.query(User).order_by(User.id).all()


@router.post("/users", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
def add_user(
    user_data: UserCreate,
    db: Session = Depends(get_db),
    admin = Depends(get_admin_user),
):
    if db.query(User).filter(User.email == user_data.email).first():
        raise HTTPException(status_code=409, detail="User already exists")

    try:
        user = User(
            name=user_data.name,
            email=user_data.email,
            password_hash=hash_password(user_data.password),
            role=user_data.role,
        )
        db.add(user)
        db.commit()
        db.refresh(user)

    except SQLAlchemyError:
        db.rollback()
        raise HTTPException(status_code=500, detail="Error adding user")

    return user


@router.put("/users/{user_id}/role")
def update_user_role(
    user_id: int,
    role_data: RoleUpdate,
    db: Session = Depends(get_db),
    admin = Depends(get_admin_user),
):
    if role_data.role is None:
        raise HTTPException(status_code=400, detail="Role is required")

    user = db.query(User).filter(User.id == user_id).first()

    if not user:
        raise HTTPException(status_code=404, detail="User not found")

    user.role = role_data.role
    db.commit()

    return {"message": "User role updated successfully"}


@router.delete("/users/{user_id}")
def delete_user(
    user_id: int,
    db: Session = Depends(get_db),
    admin = Depends(get_admin_user),
):
    if user_id == admin.id:
        raise HTTPException(status_code=400, detail="You cannot delete your own account")

    user = db.query(User).filter(User.id == user_id).first()

    if not user:
        raise HTTPException(status_code=404, detail="User not found")

    db.delete(user)
    db.commit()

    return {"message": "User deleted successfully"}
