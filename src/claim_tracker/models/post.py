"""Pydantic models for announcements and their comments."""

from typing import Optional

from pydantic import BaseModel, Field, field_validator

from claim_tracker.utils.sanitization import (
    MAX_COMMENT,
    MAX_POST_CONTENT,
    MAX_POST_TITLE,
    MAX_URL,
    sanitize_text,
)


class PostInput(BaseModel):
    """Fields an administrator supplies to create or edit a post."""

    title: str = Field(..., description="Announcement title")
    content: str = Field(..., description="Announcement body")
    media_url: Optional[str] = Field(default=None, description="Optional media reference")
    media_type: Optional[str] = Field(default=None, description="image or video")

    @field_validator("title", mode="before")
    @classmethod
    def _title(cls, value: Optional[str]) -> str:
        cleaned = sanitize_text(value, MAX_POST_TITLE)
        if not cleaned:
            raise ValueError("title is required")
        return cleaned

    @field_validator("content", mode="before")
    @classmethod
    def _content(cls, value: Optional[str]) -> str:
        cleaned = sanitize_text(value, MAX_POST_CONTENT)
        if not cleaned:
            raise ValueError("content is required")
        return cleaned

    @field_validator("media_url", "media_type", mode="before")
    @classmethod
    def _media(cls, value: Optional[str]) -> Optional[str]:
        return sanitize_text(value, MAX_URL) or None


class Post(BaseModel):
    id: str
    title: str
    content: str
    media_url: Optional[str] = None
    media_type: Optional[str] = None
    created_by: str
    author_name: str = ""
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class CommentInput(BaseModel):
    content: str = Field(..., description="Comment body")

    @field_validator("content", mode="before")
    @classmethod
    def _content(cls, value: Optional[str]) -> str:
        cleaned = sanitize_text(value, MAX_COMMENT)
        if not cleaned:
            raise ValueError("comment is required")
        return cleaned


class Comment(BaseModel):
    id: str
    post_id: str
    user_id: str
    content: str
    author_name: str = ""
    created_at: Optional[str] = None
