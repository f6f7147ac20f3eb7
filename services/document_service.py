from typing import Dict, Any, Optional

from fastapi import UploadFile
from starlette import status

from app_logging import app_logger
from common.cache_string import gettext
from common.common_services.aws_services import AWSClient, build_document_key, user_key_prefix
from common.enums import DocumentType, LoanAction
from common.exceptions import AppException, Forbidden, InternalError, ValidationError, internal_error_response
from common.utils import validate_file_type, validate_file_size, format_loan_response
from services.loan_service.lifecycle import can_transition
from services.loan_service.user_loan import UserLoanService


class DocumentService:
    def __init__(self, loan_service: UserLoanService, aws_client: Optional[AWSClient] = None) -> None:
        self.loan_service = loan_service
        self.aws_client = aws_client or AWSClient()

    async def upload_document(
            self, user_id: int, document_type: DocumentType, file: UploadFile, loan_id: Optional[int] = None
    ) -> Dict[str, Any]:
        try:
            validate_file_type(file)
            if file.size is not None:
                validate_file_size(file.size)
            file_bytes = await file.read()
            validate_file_size(len(file_bytes))

            if not self.aws_client.is_configured:
                raise InternalError("storage_unavailable")

            # Ownership and editability are checked before anything is written to the bucket
            if loan_id is not None:
                loan = self.loan_service.get_owned_loan(user_id, loan_id)
                if not can_transition(loan.status, LoanAction.update):
                    raise Forbidden("loan_not_editable")

            s3_key = build_document_key(user_id, document_type, file.filename or "document")
            upload_response = await self.aws_client.upload_to_s3(s3_key=s3_key, binary_data=file_bytes)
            app_logger.info(f"User {user_id} uploaded {document_type.value} document to {s3_key}")

            data = {
                "key": upload_response["key"],
                "document_type": document_type.value,
                "file_name": file.filename,
                "size": len(file_bytes),
            }
            if loan_id is not None:
                loan = self.loan_service.attach_document(user_id, loan_id, document_type.value, s3_key)
                data["loan_application"] = format_loan_response(loan)

            return {
                "success": True,
                "message": gettext("uploaded_successfully").format("Document"),
                "status_code": status.HTTP_201_CREATED,
                "data": data,
            }
        except AppException as e:
            return e.to_response()
        except Exception as e:
            return internal_error_response(f"Error uploading document for user {user_id}", e)

    async def get_presigned_url(self, user_id: int, key: str, is_admin: bool = False) -> Dict[str, Any]:
        try:
            if not key or ".." in key:
                raise ValidationError("validation_failed")
            if not is_admin and not key.startswith(user_key_prefix(user_id)):
                app_logger.warning(f"User {user_id} requested a document outside their prefix: {key}")
                raise Forbidden("forbidden_document_key")
            if not self.aws_client.is_configured:
                raise InternalError("storage_unavailable")

            url = await self.aws_client.generate_presigned_url(key)
            return {
                "success": True,
                "message": gettext("retrieved_successfully").format("Document URL"),
                "status_code": status.HTTP_200_OK,
                "data": {"key": key, "url": url},
            }
        except AppException as e:
            return e.to_response()
        except Exception as e:
            return internal_error_response(f"Error generating presigned url for user {user_id}", e)
