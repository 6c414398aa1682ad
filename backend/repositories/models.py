"""
SQLAlchemy ORM models for persistence.
"""
from datetime import datetime
from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    LargeBinary,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from db import Base


class BookORM(Base):
    __tablename__ = "books"

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(Text, nullable=False, index=True)
    author = Column(Text, nullable=False, index=True)
    description = Column(Text, nullable=True)
    read = Column(Boolean, default=False, nullable=False)
    added_on = Column(DateTime, default=datetime.now, nullable=False, index=True)
    goodreads_link = Column(Text, nullable=True)

    images = relationship(
        "BookImageORM",
        back_populates="book",
        cascade="all, delete-orphan",
        order_by="BookImageORM.image_id",
    )


class BookImageORM(Base):
    __tablename__ = "book_images"

    image_id = Column(Integer, primary_key=True, autoincrement=True)
    book_id = Column(Integer, ForeignKey("books.id", ondelete="CASCADE"), nullable=False)
    image = Column(LargeBinary, nullable=False)
    added_on = Column(DateTime, default=datetime.now, nullable=False)

    book = relationship("BookORM", back_populates="images")

    __table_args__ = (Index("idx_book_images_book_id", "book_id"),)


class UserORM(Base):
    __tablename__ = "users"

    user_id = Column(String, primary_key=True)
    email = Column(String, nullable=False, unique=True)
    name = Column(String, nullable=True)
    oauth_identifier = Column(String, nullable=False)


class BookLikeORM(Base):
    __tablename__ = "book_likes"

    like_id = Column(Integer, primary_key=True, autoincrement=True)
    book_id = Column(Integer, ForeignKey("books.id", ondelete="CASCADE"), nullable=False)
    user_id = Column(String, ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False)
    created_at = Column(DateTime, default=datetime.now, nullable=False)

    __table_args__ = (UniqueConstraint("book_id", "user_id", name="uq_book_likes_book_user"),)
