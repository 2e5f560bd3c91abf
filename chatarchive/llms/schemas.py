from typing import List

from pydantic import BaseModel, Field, field_validator


class EntrySummary(BaseModel):
    """Title and tags generated for an imported conversation"""

    title: str = Field(
        ..., description="A concise, informative title (5-10 words) that captures the main topic"
    )
    tags: List[str] = Field(
        ...,
        description=(
            "3-5 relevant tags, single words or short phrases, lowercase, hyphenated if needed"
        ),
    )

    @field_validator("tags")
    @classmethod
    def normalize_tags(cls, tags: List[str]) -> List[str]:
        normalized = []
        for tag in tags:
            tag = "-".join(tag.strip().lower().split())
            if tag and tag not in normalized:
                normalized.append(tag)
        return normalized
