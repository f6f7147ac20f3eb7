from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends, Query
from starlette import status

from common.enums import LoanStatus
from common.response import ApiResponse
from custom_middleware.auth_middleware import get_current_user_id
from schemas.loan_schemas import LoanForm, UpdateLoanForm
from services.dependencies import get_user_loan_service
from services.loan_service.user_loan import UserLoanService

router = APIRouter(prefix="/loans", tags=["User Panel Loan API's"])


@router.post("/apply", summary="Add Loan Application")
def add_loan_application(
        form_data: LoanForm,
        background_tasks: BackgroundTasks,
        user_id: int = Depends(get_current_user_id),
        loan_service: UserLoanService = Depends(get_user_loan_service)
):
    response = loan_service.add_loan_application(
        user_id=user_id, loan_application_form=form_data, background_tasks=background_tasks
    )

    return ApiResponse.create_response(
        success=response.get("success"),
        message=response.get("message"),
        status_code=response.get("status_code", status.HTTP_201_CREATED),
        data=response.get("data")
    )


@router.get("", summary="Get All Loan Application")
def get_all_loan_applications(
        status_filter: Optional[LoanStatus] = Query(None, description="Filter by Loan Status"),
        user_id: int = Depends(get_current_user_id),
        loan_service: UserLoanService = Depends(get_user_loan_service)
):
    response = loan_service.get_loan_applications(user_id=user_id, status_filter=status_filter)

    return ApiResponse.create_response(
        success=response.get("success"),
        message=response.get("message"),
        status_code=response.get("status_code", status.HTTP_200_OK),
        data=response.get("data")
    )


@router.get("/{loan_id}", summary="Get Loan Application Details")
def get_loan_application_details(
        loan_id: int,
        user_id: int = Depends(get_current_user_id),
        loan_service: UserLoanService = Depends(get_user_loan_service)
):
    response = loan_service.get_loan_application_details(user_id=user_id, loan_id=loan_id)

    return ApiResponse.create_response(
        success=response.get("success"),
        message=response.get("message"),
        status_code=response.get("status_code", status.HTTP_200_OK),
        data=response.get("data")
    )


@router.put("/{loan_id}", summary="Update Loan Application")
def update_loan_application(
        loan_id: int,
        form_data: UpdateLoanForm,
        user_id: int = Depends(get_current_user_id),
        loan_service: UserLoanService = Depends(get_user_loan_service)
):
    response = loan_service.update_loan_application(user_id=user_id, loan_id=loan_id, form_data=form_data)
    return ApiResponse.from_service(response)


@router.post("/{loan_id}/cancel", summary="Cancel Loan Application")
def cancel_loan_application(
        loan_id: int,
        user_id: int = Depends(get_current_user_id),
        loan_service: UserLoanService = Depends(get_user_loan_service)
):
    response = loan_service.cancel_loan_application(user_id=user_id, loan_id=loan_id)
    return ApiResponse.from_service(response)
