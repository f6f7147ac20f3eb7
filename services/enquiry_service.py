from typing import Dict, Any, Optional

from fastapi import BackgroundTasks
from starlette import status

from app_logging import app_logger
from common.cache_string import gettext
from common.common_services.email_service import EmailService
from common.enums import EnquiryStatus
from common.exceptions import AppException, NotFound, internal_error_response
from common.utils import format_model_response, pagination_meta
from config import app_config
from db_domains.db import Database
from db_domains.db_interface import DBInterface
from models.enquiry import Enquiry
from schemas.enquiry_schemas import EnquiryCreateSchema, EnquiryStatusUpdateSchema
from services.loan_service.admin_loan import parse_date_range


class EnquiryService:
    def __init__(self, database: Database) -> None:
        self.db_interface = DBInterface(Enquiry, database)

    def create_enquiry(
            self, form_data: EnquiryCreateSchema, background_tasks: Optional[BackgroundTasks] = None
    ) -> Dict[str, Any]:
        try:
            app_logger.info("Creating new enquiry")
            enquiry = self.db_interface.create({**form_data.model_dump(), "status": EnquiryStatus.new})

            if background_tasks is not None and app_config.RECIPIENT_ADMIN_EMAIL:
                body = (
                    f"A new enquiry has been received.\n\n"
                    f"Name: {enquiry.name}\n"
                    f"Email: {enquiry.email}\n"
                    f"Phone: {enquiry.phone_number or 'N/A'}\n"
                    f"Subject: {enquiry.subject}\n\n"
                    f"{enquiry.message}\n"
                )
                background_tasks.add_task(
                    EmailService().send_email, f"New enquiry: {enquiry.subject}", body, app_config.RECIPIENT_ADMIN_EMAIL
                )

            return {
                "success": True,
                "message": gettext("enquiry_received"),
                "status_code": status.HTTP_201_CREATED,
                "data": {"id": enquiry.id},
            }
        except Exception as e:
            return internal_error_response("Error creating enquiry", e)

    def get_all_enquiries(
            self, search: Optional[str] = None, status_filter: Optional[EnquiryStatus] = None,
            start_date: Optional[str] = None, end_date: Optional[str] = None, page: int = 1, limit: int = 10
    ) -> Dict[str, Any]:
        try:
            filter_def = {"AND": [{"field": "is_deleted", "op": "==", "value": False}]}
            if status_filter is not None:
                filter_def["AND"].append({"field": "status", "op": "==", "value": status_filter})

            start, end = parse_date_range(start_date, end_date)
            if start:
                filter_def["AND"].append({"field": "created_at", "op": ">=", "value": start})
            if end:
                filter_def["AND"].append({"field": "created_at", "op": "<=", "value": end})

            if search and search.strip():
                like_value = f"%{search.strip().lower()}%"
                filter_def["AND"].append(
                    {
                        "OR": [
                            {"field": "name", "op": "ilike", "value": like_value},
                            {"field": "email", "op": "ilike", "value": like_value},
                            {"field": "subject", "op": "ilike", "value": like_value},
                        ]
                    }
                )

            enquiries, total_count = self.db_interface.read_all_by_filters(
                filter_expr=self.db_interface.build_filter_expression(filter_def),
                order_by=Enquiry.created_at,
                order_direction="desc",
                limit=limit,
                offset=(page - 1) * limit,
            )
            return {
                "success": True,
                "message": gettext("retrieved_successfully").format("Enquiries"),
                "status_code": status.HTTP_200_OK,
                "data": {
                    "enquiries": [format_model_response(enquiry) for enquiry in enquiries],
                    "pagination": pagination_meta(total_count, page, limit),
                },
            }
        except AppException as e:
            return e.to_response()
        except Exception as e:
            return internal_error_response("Error fetching enquiries", e)

    def update_status(self, enquiry_id: int, form_data: EnquiryStatusUpdateSchema) -> Dict[str, Any]:
        try:
            enquiry = self.db_interface.read_by_id(enquiry_id)
            if not enquiry or enquiry.is_deleted:
                raise NotFound("not_found", "Enquiry")

            enquiry = self.db_interface.update(enquiry_id, {"status": form_data.status})
            app_logger.info(f"Enquiry {enquiry_id} marked {form_data.status.value}")
            return {
                "success": True,
                "message": gettext("updated_successfully").format("Enquiry"),
                "status_code": status.HTTP_200_OK,
                "data": format_model_response(enquiry),
            }
        except AppException as e:
            return e.to_response()
        except Exception as e:
            return internal_error_response(f"Error updating enquiry {enquiry_id}", e)
