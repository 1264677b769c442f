from sqlalchemy import Column, String, Boolean, DateTime
from .base import Base, TimestampMixin, generate_uuid


class User(Base, TimestampMixin):
    __tablename__ = "users"

    id = Column(String, primary_key=True, default=generate_uuid)
    email = Column(String(255), unique=True, nullable=False, index=True)
    hashed_password = Column(String(255), nullable=False)
    is_active = Column(Boolean, default=True)
    refresh_token = Column(String(1024), nullable=True)
    last_login = Column(DateTime(timezone=True), nullable=True)
