import datetime
from typing import Dict, Any, Optional

from fastapi import BackgroundTasks, UploadFile
from sqlalchemy import or_
from starlette import status

from app_logging import app_logger
from common.cache_string import gettext
from common.common_services.aws_services import AWSClient, build_profile_image_key
from common.common_services.email_service import EmailService
from common.common_services.jwt_service import JWTService, ExpiredTokenError, TokenError
from common.common_services.otp_service import OTPService
from common.common_services.sms_service import SMSService
from common.email_html_utils import build_email_verification_bodies
from common.enums import UserType, UserStatus
from common.exceptions import AppException, Conflict, Forbidden, NotFound, Unauthorized, ValidationError, \
    InternalError, internal_error_response
from common.message_template import get_otp_message, get_password_reset_otp_message
from common.utils import format_user_response, PasswordHashing, pagination_meta, validate_file_type, \
    validate_file_size, ALLOWED_IMAGE_CONTENT_TYPES, MAX_PROFILE_IMAGE_SIZE_BYTES
from config import app_config
from db_domains import utc_now
from db_domains.db import Database
from db_domains.db_interface import DBInterface
from models.user import User
from schemas.auth_schemas import RegisterRequest, LoginRequest, MobileAuthRequest, VerifyOTPRequest, RefreshToken, \
    UpdateProfileRequest, AdminLoginRequest, ResetPasswordRequest


class UserAuthService:
    def __init__(self, database: Database) -> None:
        self.database = database
        self.db_interface = DBInterface(User, database)
        self.password_hashing = PasswordHashing()

    def _token_response(self, user: User) -> Dict[str, Any]:
        tokens = JWTService.create_tokens(JWTService.build_payload(user))
        return {"token": tokens, "user": format_user_response(user)}

    def get_user(self, user_id: int | str) -> User:
        user = self.db_interface.read_by_id(int(user_id))
        if not user or user.is_deleted:
            raise NotFound("not_found", "User")
        return user

    def register(self, form_data: RegisterRequest) -> Dict[str, Any]:
        app_logger.info(f"Registering user with phone {form_data.phone_number[-4:]}")
        try:
            existing_user = self.db_interface.read_single_by_fields(
                [or_(User.email == form_data.email, User.phone_number == form_data.phone_number)]
            )
            if existing_user:
                raise Conflict("user_already_exists")

            user = self.db_interface.create(
                {
                    "full_name": form_data.full_name,
                    "email": form_data.email,
                    "phone_number": form_data.phone_number,
                    "password": self.password_hashing.hash_password(form_data.password),
                    "address_line1": form_data.address_line1,
                    "address_line2": form_data.address_line2,
                    "city": form_data.city,
                    "pincode": form_data.pincode,
                    "user_type": form_data.user_type,
                    "status": UserStatus.active,
                }
            )
            app_logger.info(f"User {user.id} registered as {user.user_type.value}")
            return {
                "success": True,
                "message": gettext("registered_successfully"),
                "status_code": status.HTTP_201_CREATED,
                "data": self._token_response(user),
            }
        except AppException as e:
            return e.to_response()
        except Exception as e:
            return internal_error_response("Error registering user", e)

    def _authenticate_password(self, login: str, password: str) -> User:
        user = self.db_interface.read_single_by_fields(
            [or_(User.email == login, User.phone_number == login), User.is_deleted.is_(False)]
        )
        # Unknown user and bad password are indistinguishable to the caller
        if not user or not self.password_hashing.verify_password(password, user.password):
            app_logger.warning(f"Failed login attempt for {login}")
            raise Unauthorized("invalid_credentials")
        if user.status == UserStatus.suspended:
            raise Forbidden("user_suspended")
        return user

    def login(self, login_request: LoginRequest) -> Dict[str, Any]:
        try:
            user = self._authenticate_password(login_request.email_or_phone, login_request.password)
            app_logger.info(f"User {user.id} logged in")
            return {
                "success": True,
                "message": gettext("logged_in_successfully"),
                "status_code": status.HTTP_200_OK,
                "data": self._token_response(user),
            }
        except AppException as e:
            return e.to_response()
        except Exception as e:
            return internal_error_response("Error during login", e)

    def _issue_otp(self, user: User, message_builder) -> datetime.datetime:
        otp = OTPService.generate_otp(user.phone_number)
        expires_at = OTPService.expiry_from(utc_now())
        self.db_interface.update(user.id, {"phone_otp": otp, "phone_otp_expires_at": expires_at})

        if not OTPService.is_whitelisted(user.phone_number):
            if not SMSService.send_sms(user.phone_number, message_builder(otp)):
                raise InternalError("error_sending_OTP")
        return expires_at

    def _check_otp(self, user: User, submitted_otp: str) -> None:
        if not user.phone_otp or not user.phone_otp_expires_at:
            raise ValidationError("no_pending_otp")

        if OTPService.is_expired(user.phone_otp_expires_at, utc_now()):
            self.db_interface.update(user.id, {"phone_otp": None, "phone_otp_expires_at": None})
            app_logger.info(f"Expired OTP cleared for user {user.id}")
            raise ValidationError("otp_expired")

        if not OTPService.matches(submitted_otp, user.phone_otp):
            raise ValidationError("invalid_otp")

    def send_otp(self, request_data: MobileAuthRequest) -> Dict[str, Any]:
        phone_number = request_data.phone_number
        app_logger.info(f"Initiating OTP send process for: {phone_number[-4:]}")

        try:
            user = self.db_interface.read_single_by_fields([User.phone_number == phone_number])
            if user and user.status == UserStatus.suspended:
                raise Forbidden("user_suspended")

            if not user:
                user = self.db_interface.create(
                    {
                        "full_name": "User",
                        "phone_number": phone_number,
                        "user_type": UserType.customer,
                        "status": UserStatus.pending_verification,
                    }
                )
                app_logger.info(f"Created pending user {user.id} for mobile authentication")

            expires_at = self._issue_otp(user, get_otp_message)
            return {
                "success": True,
                "message": gettext("otp_sent"),
                "status_code": status.HTTP_200_OK,
                "data": {"phone_number": phone_number, "expires_at": expires_at.isoformat()},
            }
        except AppException as e:
            return e.to_response()
        except Exception as e:
            return internal_error_response(f"Unexpected error while sending OTP to {phone_number[-4:]}", e)

    def verify_otp(self, verify_otp_request: VerifyOTPRequest) -> Dict[str, Any]:
        phone_number = verify_otp_request.phone_number
        app_logger.info(f"Verifying OTP for phone: {phone_number[-4:]}")
        try:
            user = self.db_interface.read_single_by_fields([User.phone_number == phone_number])
            if not user:
                raise NotFound("not_found", "User")

            self._check_otp(user, verify_otp_request.otp)

            if user.status == UserStatus.suspended:
                raise Forbidden("user_suspended")

            now = utc_now()
            user = self.db_interface.update(
                user.id,
                {
                    "phone_otp": None,
                    "phone_otp_expires_at": None,
                    "is_phone_verified": True,
                    "phone_verified_at": user.phone_verified_at or now,
                    "status": UserStatus.active,
                }
            )
            app_logger.info(f"OTP verified for user {user.id}")
            return {
                "success": True,
                "message": gettext("verified_successfully").format("OTP"),
                "status_code": status.HTTP_200_OK,
                "data": self._token_response(user),
            }
        except AppException as e:
            return e.to_response()
        except Exception as e:
            return internal_error_response("Error verifying OTP", e)

    def forgot_password(self, request_data: MobileAuthRequest) -> Dict[str, Any]:
        phone_number = request_data.phone_number
        app_logger.info(f"Password reset requested for: {phone_number[-4:]}")
        try:
            user = self.db_interface.read_single_by_fields(
                [User.phone_number == phone_number, User.is_deleted.is_(False)]
            )
            if not user:
                raise NotFound("not_found", "User")
            if user.status == UserStatus.suspended:
                raise Forbidden("user_suspended")

            expires_at = self._issue_otp(user, get_password_reset_otp_message)
            return {
                "success": True,
                "message": gettext("otp_sent"),
                "status_code": status.HTTP_200_OK,
                "data": {"phone_number": phone_number, "expires_at": expires_at.isoformat()},
            }
        except AppException as e:
            return e.to_response()
        except Exception as e:
            return internal_error_response(f"Error starting password reset for {phone_number[-4:]}", e)

    def reset_password(self, form_data: ResetPasswordRequest) -> Dict[str, Any]:
        phone_number = form_data.phone_number
        try:
            user = self.db_interface.read_single_by_fields(
                [User.phone_number == phone_number, User.is_deleted.is_(False)]
            )
            if not user:
                raise NotFound("not_found", "User")
            if user.status == UserStatus.suspended:
                raise Forbidden("user_suspended")

            self._check_otp(user, form_data.otp)

            # The OTP proves possession of the phone, so a pending account is verified as well
            user = self.db_interface.update(
                user.id,
                {
                    "password": self.password_hashing.hash_password(form_data.new_password),
                    "phone_otp": None,
                    "phone_otp_expires_at": None,
                    "is_phone_verified": True,
                    "phone_verified_at": user.phone_verified_at or utc_now(),
                    "status": UserStatus.active,
                }
            )
            app_logger.info(f"Password reset for user {user.id}")
            return {
                "success": True,
                "message": gettext("password_reset_successfully"),
                "status_code": status.HTTP_200_OK,
                "data": {},
            }
        except AppException as e:
            return e.to_response()
        except Exception as e:
            return internal_error_response(f"Error resetting password for {phone_number[-4:]}", e)

    def send_verification_email(
            self, user_id: int | str, background_tasks: Optional[BackgroundTasks] = None
    ) -> Dict[str, Any]:
        try:
            user = self.get_user(user_id)
            if not user.email:
                raise ValidationError("email_required")
            if user.email_verified_at:
                raise ValidationError("email_already_verified")

            token = JWTService.issue_email_verification_token(user)
            verification_link = f"{app_config.PUBLIC_BASE_URL.rstrip('/')}/auth/verify-email?token={token}"
            if background_tasks is not None:
                subject, plain_body, html_body = build_email_verification_bodies(user, verification_link)
                background_tasks.add_task(EmailService().send_email, subject, plain_body, user.email, html_body)
            app_logger.info(f"Email verification link issued for user {user.id}")
            return {
                "success": True,
                "message": gettext("email_verification_sent"),
                "status_code": status.HTTP_200_OK,
                "data": {"email": user.email},
            }
        except AppException as e:
            return e.to_response()
        except Exception as e:
            return internal_error_response(f"Error sending verification email for user {user_id}", e)

    def verify_email(self, token: str) -> Dict[str, Any]:
        try:
            try:
                payload = JWTService.verify_email_verification_token(token)
            except TokenError:
                raise ValidationError("invalid_verification_token")

            user = self.get_user(payload["userId"])
            if user.email != payload.get("email"):
                app_logger.warning(f"Verification link for a previous email presented by user {user.id}")
                raise ValidationError("invalid_verification_token")

            if not user.email_verified_at:
                user = self.db_interface.update(user.id, {"email_verified_at": utc_now()})
                app_logger.info(f"Email verified for user {user.id}")
            return {
                "success": True,
                "message": gettext("email_verified"),
                "status_code": status.HTTP_200_OK,
                "data": format_user_response(user),
            }
        except AppException as e:
            return e.to_response()
        except Exception as e:
            return internal_error_response("Error verifying email", e)

    def refresh_token(self, refresh_token_data: RefreshToken) -> dict[str, Any]:
        try:
            app_logger.info("Refreshing access token using refresh token")
            try:
                jwt_response = JWTService.refresh_access_token(refresh_token_data.refresh_token)
            except ExpiredTokenError:
                raise Unauthorized("token_expired")
            except TokenError:
                raise Unauthorized("token_refresh_failed")

            app_logger.info(gettext("token_refreshed"))
            return {
                "success": True,
                "message": gettext("token_refreshed"),
                "status_code": status.HTTP_200_OK,
                "data": jwt_response,
            }
        except AppException as e:
            return e.to_response()
        except Exception as e:
            return internal_error_response("Error refreshing token", e)

    @staticmethod
    def logout() -> Dict[str, Any]:
        # Tokens are stateless; the client discards them
        return {
            "success": True,
            "message": gettext("logged_out_successfully"),
            "status_code": status.HTTP_200_OK,
            "data": {},
        }

    def get_profile_details(self, user_id: str) -> Dict[str, Any]:
        try:
            user = self.get_user(user_id)
            return {
                "success": True,
                "message": gettext("retrieved_successfully").format("User profile"),
                "status_code": status.HTTP_200_OK,
                "data": format_user_response(user),
            }
        except AppException as e:
            return e.to_response()
        except Exception as e:
            return internal_error_response(f"Error fetching profile for user {user_id}", e)

    def update_profile(self, user_id: str, form_data: UpdateProfileRequest) -> Dict[str, Any]:
        try:
            user = self.get_user(user_id)
            update_data = form_data.model_dump(exclude_none=True)

            new_email = update_data.get("email")
            if new_email and new_email != user.email:
                if self.db_interface.read_single_by_fields([User.email == new_email, User.id != user.id]):
                    raise Conflict("already_exists", "Email")
                update_data["email_verified_at"] = None

            user = self.db_interface.update(user.id, update_data)
            app_logger.info(f"Profile updated for user {user.id}: {sorted(update_data)}")
            return {
                "success": True,
                "message": gettext("updated_successfully").format("User profile"),
                "status_code": status.HTTP_200_OK,
                "data": format_user_response(user),
            }
        except AppException as e:
            return e.to_response()
        except Exception as e:
            return internal_error_response(f"Error updating profile for user {user_id}", e)

    async def upload_profile_picture(self, user_id: int | str, file: UploadFile, aws_client: AWSClient) -> Dict[str, Any]:
        try:
            validate_file_type(file, ALLOWED_IMAGE_CONTENT_TYPES, "invalid_image_type")
            if file.size is not None:
                validate_file_size(file.size, MAX_PROFILE_IMAGE_SIZE_BYTES, "image_too_large")
            image_bytes = await file.read()
            validate_file_size(len(image_bytes), MAX_PROFILE_IMAGE_SIZE_BYTES, "image_too_large")

            if not aws_client.is_configured:
                raise InternalError("storage_unavailable")

            user = self.get_user(user_id)
            s3_key = build_profile_image_key(user.id, file.filename or "profile")
            await aws_client.upload_to_s3(s3_key=s3_key, binary_data=image_bytes)
            user = self.db_interface.update(user.id, {"profile_image": s3_key})
            app_logger.info(f"Profile picture for user {user.id} stored at {s3_key}")

            return {
                "success": True,
                "message": gettext("profile_picture_updated"),
                "status_code": status.HTTP_200_OK,
                "data": {
                    **format_user_response(user),
                    "profile_image_url": await aws_client.generate_presigned_url(s3_key),
                },
            }
        except AppException as e:
            return e.to_response()
        except Exception as e:
            return internal_error_response(f"Error uploading profile picture for user {user_id}", e)


class AdminAuthService(UserAuthService):
    def login(self, login_request: AdminLoginRequest) -> Dict[str, Any]:
        try:
            user = self._authenticate_password(login_request.login, login_request.password)
            if user.user_type != UserType.admin:
                app_logger.warning(f"Non-admin user {user.id} attempted admin login")
                raise Unauthorized("invalid_credentials")

            app_logger.info(f"Admin {user.id} logged in")
            return {
                "success": True,
                "message": gettext("logged_in_successfully"),
                "status_code": status.HTTP_200_OK,
                "data": self._token_response(user),
            }
        except AppException as e:
            return e.to_response()
        except Exception as e:
            return internal_error_response("Error during admin login", e)

    def get_all_users(
            self, search: Optional[str] = None, status_filter: Optional[UserStatus] = None,
            user_type: Optional[UserType] = None, order_by: Optional[str] = None,
            order_direction: Optional[str] = None, page: int = 1, limit: int = 10
    ) -> Dict[str, Any]:
        try:
            app_logger.info("Fetching all non-admin users")

            filter_def = {
                "AND": [
                    {"field": "user_type", "op": "!=", "value": UserType.admin},
                    {"field": "is_deleted", "op": "==", "value": False}
                ]
            }

            if status_filter is not None:
                filter_def["AND"].append({"field": "status", "op": "==", "value": status_filter})

            if user_type is not None:
                filter_def["AND"].append({"field": "user_type", "op": "==", "value": user_type})

            if search and search.strip() != "":
                like_value = f"%{search.strip().lower()}%"
                filter_def["AND"].append(
                    {
                        "OR": [
                            {"field": "full_name", "op": "ilike", "value": like_value},
                            {"field": "phone_number", "op": "ilike", "value": like_value},
                            {"field": "email", "op": "ilike", "value": like_value}
                        ]
                    }
                )

            filter_expr = self.db_interface.build_filter_expression(filter_def)
            order_column = getattr(User, order_by, User.created_at) if order_by else User.created_at

            users, total_count = self.db_interface.read_all_by_filters(
                filter_expr=filter_expr,
                order_by=order_column,
                order_direction=(order_direction or "desc").lower(),
                limit=limit,
                offset=(page - 1) * limit,
            )

            return {
                "success": True,
                "message": gettext("retrieved_successfully").format("Users"),
                "status_code": status.HTTP_200_OK,
                "data": {
                    "users": [format_user_response(user) for user in users],
                    "pagination": pagination_meta(total_count, page, limit),
                }
            }
        except AppException as e:
            return e.to_response()
        except Exception as e:
            return internal_error_response("Error retrieving users", e)

    def get_user_details(self, user_id: int) -> Dict[str, Any]:
        return self.get_profile_details(str(user_id))

    def set_user_status(self, user_id: int, target_status: UserStatus) -> Dict[str, Any]:
        try:
            user = self.get_user(user_id)

            if target_status == UserStatus.suspended:
                if user.user_type == UserType.admin:
                    raise Forbidden("cannot_suspend_admin")
                if user.status == UserStatus.suspended:
                    raise ValidationError("user_already_suspended")
                message = gettext("user_suspended_successfully")
            else:
                if user.status == UserStatus.active:
                    raise ValidationError("user_already_active")
                message = gettext("user_activated_successfully")

            user = self.db_interface.update(user.id, {"status": target_status})
            app_logger.info(f"User {user.id} status set to {target_status.value}")
            return {
                "success": True,
                "message": message,
                "status_code": status.HTTP_200_OK,
                "data": format_user_response(user),
            }
        except AppException as e:
            return e.to_response()
        except Exception as e:
            return internal_error_response(f"Error updating status of user {user_id}", e)
