"""
ماژول مدل‌های کتابخانه برای خزشگر کتابخانه متون

سلسله‌مراتب داده‌ها: نویسنده ← کتاب ← فصل ← بند متن
"""

from sqlalchemy import Column, String, Text, Integer, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship

from models.base import BaseModel, IdType


class Author(BaseModel):
    """مدل داده برای نویسنده (یکتا بر اساس نام)"""

    __tablename__ = 'authors'

    id = Column(IdType, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False, unique=True)
    canonical_url = Column(String(512), nullable=True)

    books = relationship("Book", back_populates="author")


class Book(BaseModel):
    """مدل داده برای کتاب (یکتا بر اساس آدرس)"""

    __tablename__ = 'books'

    id = Column(IdType, primary_key=True, autoincrement=True)
    author_id = Column(IdType, ForeignKey('authors.id', ondelete='CASCADE'), nullable=False)
    title = Column(String(255), nullable=False)
    canonical_url = Column(String(512), nullable=False, unique=True)
    category = Column(String(255), nullable=True)

    author = relationship("Author", back_populates="books")
    chapters = relationship("Chapter", back_populates="book")


class Chapter(BaseModel):
    """مدل داده برای فصل؛ هر صفحه متن یک فصل است"""

    __tablename__ = 'chapters'

    id = Column(IdType, primary_key=True, autoincrement=True)
    book_id = Column(IdType, ForeignKey('books.id', ondelete='CASCADE'), nullable=False)
    title = Column(String(512), nullable=False)
    sequence_number = Column(Integer, nullable=False)
    canonical_url = Column(String(512), nullable=False, unique=True)

    book = relationship("Book", back_populates="chapters")
    segments = relationship("Segment", back_populates="chapter", order_by="Segment.sequence_number")


class Segment(BaseModel):
    """مدل داده برای یک بند متن درون فصل"""

    __tablename__ = 'segments'
    __table_args__ = (
        UniqueConstraint('chapter_id', 'sequence_number', name='unique_chapter_segment'),
    )

    id = Column(IdType, primary_key=True, autoincrement=True)
    chapter_id = Column(IdType, ForeignKey('chapters.id', ondelete='CASCADE'), nullable=False)
    sequence_number = Column(Integer, nullable=False)
    text = Column(Text, nullable=False)

    chapter = relationship("Chapter", back_populates="segments")
