# app/models/users.py

from sqlalchemy import CheckConstraint, Column, Integer, String, DateTime
from sqlalchemy.sql import func

from app.database import Base

ROLE_ADMIN = "admin"
ROLE_STOCK_OPERATOR = "stock_operator"
ROLE_USER = "user"

ROLES = (ROLE_ADMIN, ROLE_STOCK_OPERATOR, ROLE_USER)


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    email = Column(String, unique=True, index=True, nullable=False)
    password_hash = Column(String, nullable=False)

    # Role decides which dashboard and routes the user can reach
    role = Column(String, nullable=False, default=ROLE_USER)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    __table_args__ = (
        CheckConstraint(
            "role IN ('admin', 'stock_operator', 'user')",
            name="ck_users_role_valid",
        ),
    )

    @property
    def is_admin(self):
        return self.role == ROLE_ADMIN
