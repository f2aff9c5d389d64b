import logging

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError

from app.database import get_db
from app.models.users import User, ROLE_ADMIN
from app.schemas.user import UserLogin, UserResponse, AdminBootstrap
from app.core.auth import get_current_user
from app.core.hashing import hash_password, verify_password
from app.core.jwt import create_access_token
from app.core.oauth2 import TOKEN_COOKIE_NAME
from app.core.rate_limiter import limiter
from app.core.config import settings

logger = logging.getLogger("app")

router = APIRouter(tags=["Authentication"])


def _cookie_options():
    return {
        "httponly": True,
        "secure": settings.ENV == "production",
        "samesite": "strict",
    }


# ---------------- LOGIN (COOKIE + TOKEN) ----------------
@router.post("/auth/login")
@limiter.limit("5/minute")
def login(
    request: Request,
    response: Response,
    credentials: UserLogin,
    db: Session = Depends(get_db),
):
    if not credentials.email or not credentials.password or not credentials.role:
        raise HTTPException(status_code=400, detail="All fields are required")

    user = db.query(User).filter(User.email == credentials.email).first()

    if not user:
        raise HTTPException(status_code=403, detail="User not found")

    if user.role != credentials.role:
        raise HTTPException(
            status_code=403,
            detail=f"Access denied for role: {credentials.role}",
        )

    if not verify_password(credentials.password, user.password_hash):
        raise HTTPException(status_code=401, detail="Invalid credentials")

    token = create_access_token(
        data={"sub": str(user.id), "email": user.email, "role": user.role}
    )

    response.set_cookie(TOKEN_COOKIE_NAME, token, **_cookie_options())

    logger.info(f"Login succeeded for user {user.id} ({user.role})")

    return {
        "message": "Login successful",
        "user": {"id": user.id, "email": user.email, "role": user.role},
        "access_token": token,
        "token_type": "bearer",
    }


# ---------------- LOGOUT ----------------
@router.post("/auth/logout")
def logout(response: Response):
    response.delete_cookie(TOKEN_COOKIE_NAME, **_cookie_options())
    return {"message": "Logged out successfully"}


# ---------------- CURRENT USER ----------------
@router.get("/auth/me", response_model=UserResponse)
def me(current_user: User = Depends(get_current_user)):
    return current_user


# ---------------- FIRST ADMIN ----------------
@router.post("/internal/bootstrap-admin", status_code=status.HTTP_201_CREATED)
def bootstrap_admin(
    data: AdminBootstrap,
    db: Session = Depends(get_db),
):
    # Protect this route with a secret key
    if not settings.INTERNAL_ADMIN_SECRET or data.secret != settings.INTERNAL_ADMIN_SECRET:
        raise HTTPException(status_code=403, detail="Unauthorized")

    if db.query(User).filter(User.role == ROLE_ADMIN).first():
        raise HTTPException(status_code=409, detail="An admin already exists")

    try:
        user = User(
            name=data.name,
            email=data.email,
            password_hash=hash_password(data.password),
            role=ROLE_ADMIN,
        )
        db.add(user)
        db.commit()

    except SQLAlchemyError:
        db.rollback()
        raise HTTPException(status_code=500, detail="Unable to create admin")

    return {"message": f"{data.email} is now admin"}
