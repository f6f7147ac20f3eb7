from typing import Dict, Any

from starlette import status

from app_logging import app_logger
from common.cache_string import gettext
from common.exceptions import AppException, NotFound, ValidationError, internal_error_response
from common.utils import format_model_response
from db_domains.db import Database
from db_domains.db_interface import DBInterface
from models.content import StaticContent
from schemas.content_schemas import StaticContentUpsert


class ContentService:
    def __init__(self, database: Database) -> None:
        self.db_interface = DBInterface(StaticContent, database)

    def get_published_content(self, slug: str) -> Dict[str, Any]:
        try:
            content = self.db_interface.read_single_by_fields(
                [StaticContent.slug == slug, StaticContent.is_published.is_(True), StaticContent.is_deleted.is_(False)]
            )
            if not content:
                raise NotFound("not_found", "Content")
            return {
                "success": True,
                "message": gettext("retrieved_successfully").format("Content"),
                "status_code": status.HTTP_200_OK,
                "data": {
                    "slug": content.slug,
                    "title": content.title,
                    "content_body": content.content_body,
                    "meta_description": content.meta_description or "",
                    "updated_at": content.modified_at.isoformat() if content.modified_at else None,
                },
            }
        except AppException as e:
            return e.to_response()
        except Exception as e:
            return internal_error_response(f"Error fetching content '{slug}'", e)

    def upsert_content(self, admin_id: int, slug: str, form_data: StaticContentUpsert) -> Dict[str, Any]:
        try:
            if not StaticContent.is_valid_slug(slug):
                raise ValidationError("invalid_slug")

            data = {**form_data.model_dump(), "last_updated_by": admin_id}
            existing = self.db_interface.read_single_by_fields([StaticContent.slug == slug])
            if existing:
                content = self.db_interface.update(existing.id, {**data, "is_deleted": False, "deleted_at": None})
                status_code, message_key = status.HTTP_200_OK, "updated_successfully"
            else:
                content = self.db_interface.create({**data, "slug": slug})
                status_code, message_key = status.HTTP_201_CREATED, "created_successfully"

            app_logger.info(f"Admin {admin_id} saved content '{slug}' (published={content.is_published})")
            return {
                "success": True,
                "message": gettext(message_key).format("Content"),
                "status_code": status_code,
                "data": format_model_response(content),
            }
        except AppException as e:
            return e.to_response()
        except Exception as e:
            return internal_error_response(f"Error saving content '{slug}'", e)
