"""Archive entry domain models."""

from datetime import datetime, timezone
from typing import Annotated, Literal

import numpy as np
from numpy.typing import NDArray
from pydantic import BaseModel, BeforeValidator, Field, PlainSerializer


def nd_array_before_validator(x: list[float] | NDArray[np.float32] | None) -> NDArray | None:
    if x is None:
        return None
    return np.asarray(x, dtype=np.float32)


def nd_array_serializer(x: NDArray[np.float32] | None) -> list[float] | None:
    if x is None:
        return None
    return x.tolist()  # type: ignore


NumPyArray = Annotated[
    np.ndarray | None,
    BeforeValidator(nd_array_before_validator),
    PlainSerializer(nd_array_serializer, return_type=list | None),
]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Message(BaseModel):
    """One turn of an archived conversation."""

    role: Literal["user", "assistant"]
    content: str


class Entry(BaseModel):
    """Represents one archived conversation or note.

    Attributes:
        id: Unique, immutable identifier
        title: Entry title, either imported or generated by the summarizer
        summary: Short free-text summary
        tags: Tags used for organizing and for tag-overlap scoring
        source_label: Which AI produced the conversation (ChatGPT, Claude, ...)
        created_at: When the conversation was created
        updated_at: When the entry was last modified
        messages: Conversation turns; their joined content is the body text
        embedding: Optional precomputed embedding of the entry text
    """

    id: str
    title: str
    summary: str = ""
    tags: set[str] = Field(default_factory=set)
    source_label: str = "Other"
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
    messages: list[Message] = []
    embedding: NumPyArray = None

    model_config = {"arbitrary_types_allowed": True}

    @property
    def body_text(self) -> str:
        return " ".join(message.content for message in self.messages)

    @property
    def has_embedding(self) -> bool:
        return self.embedding is not None and self.embedding.size > 0
