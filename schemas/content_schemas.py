from typing import Optional

from pydantic import BaseModel, Field


class StaticContentUpsert(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    content_body: str = Field(..., min_length=1)
    meta_description: Optional[str] = Field(None, max_length=500)
    is_published: bool = False
