from typing import Optional

from fastapi import APIRouter, Depends, Query
from starlette import status

from common.response import ApiResponse
from services.dashboard import DashboardService
from services.dependencies import get_dashboard_service

router = APIRouter(prefix="/admin", tags=["Admin Dashboard API's"])


@router.get("/dashboard/stats", summary="Get Dashboard Counts")
def get_dashboard_counts(dashboard_service: DashboardService = Depends(get_dashboard_service)):
    response = dashboard_service.get_counts()
    return ApiResponse.create_response(
        success=response.get("success"),
        message=response.get("message"),
        status_code=response.get("status_code", status.HTTP_200_OK),
        data=response.get("data")
    )


@router.get("/reports/overview", summary="Get Overview Report")
def get_overview_report(
        start_date: Optional[str] = Query(None, description="Start Date for Range Filter (YYYY-MM-DD)"),
        end_date: Optional[str] = Query(None, description="End Date for Range Filter (YYYY-MM-DD)"),
        dashboard_service: DashboardService = Depends(get_dashboard_service)
):
    return ApiResponse.from_service(dashboard_service.get_overview_report(start_date, end_date))
