"""Post and comment payload schemas.

Shape validation (lengths, required text) happens upstream of the services;
these models fix the payload fields and reject unknown keys.
"""

from pydantic import BaseModel, ConfigDict


class PostCreate(BaseModel):
    """Body of a new post."""

    model_config = ConfigDict(extra="forbid")

    text: str


class CommentCreate(BaseModel):
    """Body of a new comment on a post."""

    model_config = ConfigDict(extra="forbid")

    text: str
