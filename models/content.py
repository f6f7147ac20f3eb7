import re

from sqlalchemy import Column, Integer, String, Boolean, Text, ForeignKey

from db_domains import CreateUpdateTime


class StaticContent(CreateUpdateTime):
    __tablename__ = "static_contents"

    id = Column(Integer, primary_key=True, index=True)
    slug = Column(String(100), unique=True, nullable=False, index=True)
    title = Column(String(255), nullable=False)
    content_body = Column(Text, nullable=False)
    meta_description = Column(String(500), nullable=True)
    last_updated_by = Column(Integer, ForeignKey("users.id"), nullable=True)
    is_published = Column(Boolean, default=False)

    @classmethod
    def is_valid_slug(cls, slug: str) -> bool:
        return bool(re.fullmatch(r"[a-z0-9-]+", slug or ""))

    def __init__(self, **kwargs):
        super().__init__(**kwargs)

        if not self.is_valid_slug(self.slug):
            raise ValueError(f"Invalid slug: {self.slug}")
