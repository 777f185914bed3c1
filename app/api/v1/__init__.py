from fastapi import APIRouter

from .endpoints import health, fiscal_years, codes, journals, reports

api_router = APIRouter()

api_router.include_router(health.router, prefix="/health", tags=["health"])
api_router.include_router(fiscal_years.router, prefix="/fiscal-years", tags=["fiscal-years"])
api_router.include_router(codes.router, prefix="/codes", tags=["codes"])
api_router.include_router(journals.router, prefix="/journals", tags=["journals"])
api_router.include_router(reports.router, prefix="/reports", tags=["reports"])
