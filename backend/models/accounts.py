"""Account Models

Institutions (migrated from LearnDash groups) and users (migrated from
WordPress authors).
"""
from datetime import datetime
from sqlalchemy import Column, String, DateTime, Text, ForeignKey, Integer, Boolean

from core.database import Base


class Institution(Base):
    """School, university or other organisation that owns classes"""
    __tablename__ = "institutions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False, index=True)
    type = Column(String(30), nullable=False, default="school")  # school, university, language_center, private_tutor, corporate
    address = Column(Text)
    contact_email = Column(String(255))
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class User(Base):
    """Platform account"""
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(100))
    email = Column(String(255), nullable=False, unique=True)
    password_hash = Column(Text, nullable=False)
    role = Column(String(30), nullable=False, default="student")  # student, teacher, content_creator, admin, ...
    preferred_language = Column(String(20), default="all")
    institution_id = Column(Integer, ForeignKey("institutions.id"))
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
    deleted_at = Column(DateTime)
