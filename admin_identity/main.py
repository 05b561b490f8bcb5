# main.py

import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from admin_identity.core.config import settings
from admin_identity.core.errors import AdminIdentityError
from admin_identity.core.logging_config import configure_logging
from admin_identity.db.admin_repository import AdminRepository
from admin_identity.db.mongodb import connect_to_mongo, close_mongo_connection, get_client

from admin_identity.api.v1.routes.admin_auth_route import router as admin_auth_router

logger = logging.getLogger(__name__)


# -----------------------------
# FASTAPI APP
# -----------------------------
app = FastAPI(
    title=settings.PROJECT_NAME,
    version="1.0.0",
    description="Admin accounts, credentials and password reset for Veraawell"
)

# -----------------------------
# CORS MIDDLEWARE
# -----------------------------
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# -----------------------------
# ERROR HANDLING
# -----------------------------
@app.exception_handler(AdminIdentityError)
async def admin_identity_error_handler(request: Request, exc: AdminIdentityError):
    if exc.status_code >= 500:
        logger.error("%s on %s: %s", type(exc).__name__, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content=exc.to_response())


# -----------------------------
# ROUTERS
# -----------------------------
app.include_router(admin_auth_router, prefix="/api/v1/admin/auth")


# -----------------------------
# STARTUP EVENT
# -----------------------------
@app.on_event("startup")
async def startup_event():
    configure_logging()
    logger.info("🚀 Starting %s...", settings.PROJECT_NAME)
    await connect_to_mongo()

    db = get_client()[settings.MONGO_DB_NAME]
    await AdminRepository(db).ensure_indexes()
    logger.info("🔧 Admin indexes created")


# -----------------------------
# SHUTDOWN EVENT
# -----------------------------
@app.on_event("shutdown")
async def shutdown_event():
    logger.info("🛑 Shutting down API...")
    await close_mongo_connection()


# -----------------------------
# ROOT ENDPOINT
# -----------------------------
@app.get("/", tags=["Health"])
def root():
    return {
        "message": "Admin Identity Backend Running",
        "version": "1.0.0",
        "docs": "/docs"
    }
