from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends, Query
from starlette import status

from common.enums import LoanStatus
from common.response import ApiResponse
from custom_middleware.auth_middleware import get_current_admin_id
from schemas.loan_schemas import LoanApprovalForm, LoanRejectionForm, LoanStatusUpdateForm
from services.dependencies import get_admin_loan_service
from services.loan_service.admin_loan import AdminLoanService

router = APIRouter(prefix="/admin/loans", tags=["Admin Panel Loan API's"])


@router.get("", summary="Get All Loan Application")
def get_all_loans(
        search: Optional[str] = Query(None, description="Search text for application id, name, phone, email"),
        status_filter: Optional[LoanStatus] = Query(None, description="Filter by Loan Status"),
        order_by: Optional[str] = Query(None, description="Field Name to Order By"),
        order_direction: Optional[str] = Query(None, description="Field Name to Order Direction"),
        page: int = Query(1, ge=1, description="Page number"),
        limit: int = Query(10, ge=1, le=100, description="Number of items per page"),
        start_date: Optional[str] = Query(None, description="Start Date for Range Filter (YYYY-MM-DD)"),
        end_date: Optional[str] = Query(None, description="End Date for Range Filter (YYYY-MM-DD)"),
        admin_loan_service: AdminLoanService = Depends(get_admin_loan_service)
):
    response = admin_loan_service.get_all_loans(
        search=search, status_filter=status_filter, order_by=order_by, order_direction=order_direction,
        page=page, limit=limit, start_date=start_date, end_date=end_date
    )

    return ApiResponse.create_response(
        success=response.get("success"),
        message=response.get("message"),
        status_code=response.get("status_code", status.HTTP_200_OK),
        data=response.get("data")
    )


@router.get("/{loan_id}", summary="Get Loan Details")
def get_loan_details(loan_id: int, admin_loan_service: AdminLoanService = Depends(get_admin_loan_service)):
    response = admin_loan_service.get_admin_loan_details(loan_id=loan_id)

    return ApiResponse.create_response(
        success=response.get("success"),
        message=response.get("message"),
        status_code=response.get("status_code", status.HTTP_200_OK),
        data=response.get("data")
    )


@router.post("/{loan_id}/approve", summary="Approve Loan Application")
def approve_loan(
        loan_id: int,
        form_data: LoanApprovalForm,
        background_tasks: BackgroundTasks,
        admin_id: int = Depends(get_current_admin_id),
        admin_loan_service: AdminLoanService = Depends(get_admin_loan_service)
):
    response = admin_loan_service.approve_loan(
        admin_id=admin_id, loan_id=loan_id, form_data=form_data, background_tasks=background_tasks
    )

    return ApiResponse.create_response(
        success=response.get("success"),
        message=response.get("message"),
        status_code=response.get("status_code", status.HTTP_200_OK),
        data=response.get("data")
    )


@router.post("/{loan_id}/reject", summary="Reject Loan Application")
def reject_loan(
        loan_id: int,
        form_data: LoanRejectionForm,
        background_tasks: BackgroundTasks,
        admin_id: int = Depends(get_current_admin_id),
        admin_loan_service: AdminLoanService = Depends(get_admin_loan_service)
):
    response = admin_loan_service.reject_loan(
        admin_id=admin_id, loan_id=loan_id, form_data=form_data, background_tasks=background_tasks
    )

    return ApiResponse.create_response(
        success=response.get("success"),
        message=response.get("message"),
        status_code=response.get("status_code", status.HTTP_200_OK),
        data=response.get("data")
    )


@router.put("/{loan_id}/status", summary="Update Loan Application Status")
def update_loan_status(
        loan_id: int,
        form_data: LoanStatusUpdateForm,
        admin_id: int = Depends(get_current_admin_id),
        admin_loan_service: AdminLoanService = Depends(get_admin_loan_service)
):
    response = admin_loan_service.update_loan_status(admin_id=admin_id, loan_id=loan_id, form_data=form_data)
    return ApiResponse.from_service(response)
