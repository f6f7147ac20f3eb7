from typing import Dict, Any, Optional

from starlette import status

from app_logging import app_logger
from common.cache_string import gettext
from common.exceptions import AppException, Conflict, NotFound, internal_error_response
from common.utils import format_model_response, pagination_meta
from db_domains.db import Database
from db_domains.db_interface import DBInterface
from models.bank_partner import BankPartner
from schemas.partner_schemas import BankPartnerCreate, BankPartnerUpdate


class BankPartnerService:
    def __init__(self, database: Database) -> None:
        self.db_interface = DBInterface(BankPartner, database)

    def _get_partner(self, partner_id: int) -> BankPartner:
        partner = self.db_interface.read_by_id(partner_id)
        if not partner or partner.is_deleted:
            raise NotFound("not_found", "Bank partner")
        return partner

    def _check_unique_name(self, name: str, exclude_id: Optional[int] = None) -> None:
        filters = [BankPartner.name == name, BankPartner.is_deleted.is_(False)]
        if exclude_id is not None:
            filters.append(BankPartner.id != exclude_id)
        if self.db_interface.read_single_by_fields(filters):
            raise Conflict("already_exists", "Bank partner")

    def list_active_partners(self) -> Dict[str, Any]:
        try:
            partners = self.db_interface.read_by_fields(
                [BankPartner.is_active.is_(True), BankPartner.is_deleted.is_(False)], order_by=BankPartner.name
            )
            return {
                "success": True,
                "message": gettext("retrieved_successfully").format("Bank partners"),
                "status_code": status.HTTP_200_OK,
                "data": [
                    {"id": partner.id, "name": partner.name, "logo_url": partner.logo_url or ""}
                    for partner in partners
                ],
            }
        except Exception as e:
            return internal_error_response("Error fetching active bank partners", e)

    def get_all_partners(
            self, search: Optional[str] = None, is_active: Optional[bool] = None, page: int = 1, limit: int = 10
    ) -> Dict[str, Any]:
        try:
            filter_def = {"AND": [{"field": "is_deleted", "op": "==", "value": False}]}
            if is_active is not None:
                filter_def["AND"].append({"field": "is_active", "op": "==", "value": is_active})
            if search and search.strip():
                like_value = f"%{search.strip().lower()}%"
                filter_def["AND"].append(
                    {
                        "OR": [
                            {"field": "name", "op": "ilike", "value": like_value},
                            {"field": "contact_person_name", "op": "ilike", "value": like_value},
                            {"field": "contact_person_email", "op": "ilike", "value": like_value},
                        ]
                    }
                )

            partners, total_count = self.db_interface.read_all_by_filters(
                filter_expr=self.db_interface.build_filter_expression(filter_def),
                order_by=BankPartner.created_at,
                order_direction="desc",
                limit=limit,
                offset=(page - 1) * limit,
            )
            return {
                "success": True,
                "message": gettext("retrieved_successfully").format("Bank partners"),
                "status_code": status.HTTP_200_OK,
                "data": {
                    "partners": [format_model_response(partner) for partner in partners],
                    "pagination": pagination_meta(total_count, page, limit),
                },
            }
        except Exception as e:
            return internal_error_response("Error fetching bank partners", e)

    def get_partner_details(self, partner_id: int) -> Dict[str, Any]:
        try:
            partner = self._get_partner(partner_id)
            return {
                "success": True,
                "message": gettext("retrieved_successfully").format("Bank partner"),
                "status_code": status.HTTP_200_OK,
                "data": format_model_response(partner),
            }
        except AppException as e:
            return e.to_response()
        except Exception as e:
            return internal_error_response(f"Error fetching bank partner {partner_id}", e)

    def create_partner(self, admin_id: int, form_data: BankPartnerCreate) -> Dict[str, Any]:
        try:
            self._check_unique_name(form_data.name)
            partner = self.db_interface.create(
                {**form_data.model_dump(), "created_by": admin_id, "modified_by": admin_id}
            )
            app_logger.info(f"Admin {admin_id} created bank partner {partner.id}")
            return {
                "success": True,
                "message": gettext("created_successfully").format("Bank partner"),
                "status_code": status.HTTP_201_CREATED,
                "data": format_model_response(partner),
            }
        except AppException as e:
            return e.to_response()
        except Exception as e:
            return internal_error_response("Error creating bank partner", e)

    def update_partner(self, admin_id: int, partner_id: int, form_data: BankPartnerUpdate) -> Dict[str, Any]:
        try:
            self._get_partner(partner_id)
            update_data = form_data.model_dump(exclude_none=True)
            if "name" in update_data:
                self._check_unique_name(update_data["name"], exclude_id=partner_id)

            partner = self.db_interface.update(partner_id, {**update_data, "modified_by": admin_id})
            return {
                "success": True,
                "message": gettext("updated_successfully").format("Bank partner"),
                "status_code": status.HTTP_200_OK,
                "data": format_model_response(partner),
            }
        except AppException as e:
            return e.to_response()
        except Exception as e:
            return internal_error_response(f"Error updating bank partner {partner_id}", e)

    def toggle_status(self, admin_id: int, partner_id: int) -> Dict[str, Any]:
        try:
            partner = self._get_partner(partner_id)
            partner = self.db_interface.update(
                partner_id, {"is_active": not partner.is_active, "modified_by": admin_id}
            )
            state = "activated" if partner.is_active else "deactivated"
            app_logger.info(f"Admin {admin_id} {state} bank partner {partner_id}")
            return {
                "success": True,
                "message": gettext("partner_status_toggled").format(state),
                "status_code": status.HTTP_200_OK,
                "data": format_model_response(partner),
            }
        except AppException as e:
            return e.to_response()
        except Exception as e:
            return internal_error_response(f"Error toggling bank partner {partner_id}", e)

    def delete_partner(self, admin_id: int, partner_id: int) -> Dict[str, Any]:
        try:
            if not self.db_interface.soft_delete(
                    [BankPartner.id == partner_id, BankPartner.is_deleted.is_(False)], admin_id
            ):
                raise NotFound("not_found", "Bank partner")
            app_logger.info(f"Admin {admin_id} deleted bank partner {partner_id}")
            return {
                "success": True,
                "message": gettext("deleted_successfully").format("Bank partner"),
                "status_code": status.HTTP_200_OK,
                "data": {},
            }
        except AppException as e:
            return e.to_response()
        except Exception as e:
            return internal_error_response(f"Error deleting bank partner {partner_id}", e)
