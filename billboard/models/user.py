"""User Model - principals that act on shops"""

from sqlalchemy import Column, String
from sqlalchemy.orm import relationship

from billboard.models.base import BaseModel, SoftDeleteMixin, StatusMixin


class User(BaseModel, SoftDeleteMixin, StatusMixin):
    """
    Authenticated principal.
    Credentials live with the auth service; this table only anchors
    memberships and the created_by columns on bills and payments.
    """
    __tablename__ = "users"

    email = Column(String(255), unique=True, nullable=False, index=True)
    first_name = Column(String(255), nullable=False)
    last_name = Column(String(255), nullable=False)
    phone = Column(String(50), nullable=True)

    # Relationships
    memberships = relationship("ShopUser", back_populates="user", cascade="all, delete-orphan")

    def __repr__(self) -> str:
        return f"<User {self.email}>"
