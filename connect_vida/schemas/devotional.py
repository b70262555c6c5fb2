"""
Connect Vida - Devotional Schemas
"""
from pydantic import BaseModel, Field
from typing import Optional, Literal


class DevotionalCreate(BaseModel):
    title: str = Field(..., min_length=2, max_length=255)
    content: str = Field(..., min_length=1)
    bible_verse: Optional[str] = Field(None, max_length=255)


class DevotionalUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=2, max_length=255)
    content: Optional[str] = Field(None, min_length=1)
    bible_verse: Optional[str] = Field(None, max_length=255)


class DevotionalStatusUpdate(BaseModel):
    status: Literal["rascunho", "publicado", "arquivado"]


class CommentCreate(BaseModel):
    content: str = Field(..., min_length=1, max_length=2000)
