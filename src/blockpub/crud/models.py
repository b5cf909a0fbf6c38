"""Database table definitions for block documents (blog posts and newsletters)"""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional
from uuid import UUID, uuid4

from sqlalchemy import JSON, Column, DateTime, String, Text
from sqlmodel import Field, SQLModel


class DocumentKind(str, Enum):
    """Which admin surface a block document belongs to"""
    blog = "blog"
    newsletter = "newsletter"


class Document(SQLModel, table=True):
    """A blog post or newsletter whose body is an opaque, ordered array of block records"""
    __tablename__ = "documents"
    id: UUID = Field(default_factory=uuid4, primary_key=True)
    kind: DocumentKind = Field(default=DocumentKind.blog, index=True, nullable=False)
    slug: str = Field(..., index=True, unique=True, nullable=False)
    title: str = Field(..., sa_column=Column(Text, nullable=False))
    excerpt: Optional[str] = Field(default=None, sa_column=Column(Text, nullable=True))
    author: Optional[str] = Field(default=None, nullable=True)
    read_time: Optional[str] = Field(default=None, nullable=True)    # e.g. "5 min read"
    blocks: List[Dict[str, Any]] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    hash: str = Field(..., sa_column=Column(String(64), nullable=False))
    is_published: bool = Field(default=False, nullable=False)
    published_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime(timezone=False), nullable=True))
    created_at: datetime = Field(default_factory=datetime.now, sa_column=Column(DateTime(timezone=False), nullable=False))
    updated_at: datetime = Field(default_factory=datetime.now, sa_column=Column(DateTime(timezone=False), nullable=False))
