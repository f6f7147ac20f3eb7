from contextlib import asynccontextmanager

import uvicorn
from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from app.admin.admin_auth import router as admin_auth_router
from app.admin.admin_catalog import router as admin_catalog_router
from app.admin.admin_content import router as admin_content_router
from app.admin.admin_dashboard import router as admin_dashboard_router
from app.admin.admin_loan import router as admin_loan_router
from app.admin.admin_partner import router as admin_partner_router
from app.general.general import router as general_router
from app.user.user_auth import router as user_auth_router
from app.user.user_document import router as user_document_router
from app.user.user_loan import router as user_loan_router
from app.user.user_membership import router as user_membership_router
from app.user.user_payment import router as user_payment_router
from app.user.user_profile import router as user_profile_router
from app.user.user_subscription import router as user_subscription_router
from app_logging import app_logger
from common.cache_string import refresh_cache_strings
from common.exceptions import AppException
from common.response import validation_exception_handler, app_exception_handler, unhandled_exception_handler
from config import app_config, config_utils
from custom_middleware.auth_middleware import AuthMiddleware
from db_domains.db import build_database

load_dotenv()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan event manager for startup and shutdown tasks."""
    refresh_cache_strings()
    if config_utils.is_prod_server and config_utils.uses_default_jwt_secrets():
        app_logger.warning("Production server is running with the default JWT secrets")

    owns_database = getattr(app.state, "db", None) is None
    if owns_database:
        app.state.db = build_database()
    app_logger.info("Initializing database...")
    app.state.db.init_db()
    yield
    app_logger.info("Shutting down...")
    if owns_database:
        app.state.db.dispose()


app = FastAPI(
    title="Blumiq",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan
)

app.add_middleware(AuthMiddleware)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(AppException, app_exception_handler)
app.add_exception_handler(Exception, unhandled_exception_handler)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/", summary="Service Info", include_in_schema=False)
def root():
    return {"message": "Blumiq API", "version": app.version}


@app.get("/health", summary="Health Check")
def health():
    return {"status": "healthy", "server_type": app_config.SERVER_TYPE}


# User Routers
app.include_router(user_auth_router)
app.include_router(user_profile_router)
app.include_router(user_loan_router)
app.include_router(user_membership_router)
app.include_router(user_subscription_router)
app.include_router(user_payment_router)
app.include_router(user_document_router)

# Admin Routers
app.include_router(admin_auth_router)
app.include_router(admin_loan_router)
app.include_router(admin_dashboard_router)
app.include_router(admin_partner_router)
app.include_router(admin_catalog_router)
app.include_router(admin_content_router)

app.include_router(general_router)

if __name__ == "__main__":
    refresh_cache_strings()
    uvicorn.run(
        "main:app",
        host=app_config.HOST_URL,
        port=app_config.HOST_PORT,
        log_level="info",
        reload=True
    )
