from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class Author(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    first_name: str = Field(alias="firstName")
    last_name: str = Field(alias="lastName")


class BlogPost(BaseModel):
    """A stored post. ``created`` is set once by the store and never rewritten."""

    id: str
    title: str
    content: str
    author: Author
    created: datetime


class PostCreate(BaseModel):
    title: str
    content: str
    author: Author


class PostUpdate(BaseModel):
    id: Optional[str] = None
    title: Optional[str] = None
    content: Optional[str] = None
    author: Optional[Author] = None


class PostOut(BaseModel):
    id: str
    title: str
    content: str
    author: str
    created: datetime


def author_name(author: Author) -> str:
    return f"{author.first_name} {author.last_name}".strip()


def serialize_post(post: BlogPost) -> PostOut:
    return PostOut(
        id=post.id,
        title=post.title,
        content=post.content,
        author=author_name(post.author),
        created=post.created,
    )
