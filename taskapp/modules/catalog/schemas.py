from pydantic import BaseModel, field_validator
from typing import Optional


class CatalogTask(BaseModel):
    id: Optional[int] = None
    description: str
    category: Optional[str] = None
    difficulty: str = "medium"
    source: str = "catalog"  # catalog | activity

    @field_validator("difficulty", mode="before")
    @classmethod
    def default_difficulty(cls, value):
        return (value or "medium").strip().lower()


class CatalogTaskCreate(BaseModel):
    description: str
    category: Optional[str] = None

    @field_validator("description")
    @classmethod
    def description_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Description cannot be empty")
        return value
