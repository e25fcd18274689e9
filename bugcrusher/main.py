import logging

from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles

from bugcrusher.core.config import STORAGE_PUBLIC_PATH, STORAGE_ROOT
from bugcrusher.core.errors import CompetitionError, competition_error_handler
from bugcrusher.core.logging_middleware import LoggingMiddleware
from bugcrusher.db.init_db import init_db
from bugcrusher.routers.admin import router as admin_router
from bugcrusher.routers.auth import router as auth_router
from bugcrusher.routers.bugs import router as bugs_router
from bugcrusher.routers.dashboard import router as dashboard_router
from bugcrusher.routers.submissions import router as submissions_router

logging.basicConfig(level=logging.INFO)

app = FastAPI(title="Bug Crusher Dashboard")

# Middleware
app.add_middleware(LoggingMiddleware)

# Operation-scoped errors -> {"detail": ...}
app.add_exception_handler(CompetitionError, competition_error_handler)


# Health check
@app.get("/health")
def health():
    return {"status": "ok"}


# Startup event
@app.on_event("startup")
def on_startup():
    init_db()
    STORAGE_ROOT.mkdir(parents=True, exist_ok=True)


# Include routers
app.include_router(auth_router, prefix="/auth", tags=["auth"])
app.include_router(admin_router, prefix="/admin", tags=["admin"])
app.include_router(dashboard_router, prefix="/dashboard", tags=["dashboard"])
app.include_router(bugs_router, prefix="/bugs", tags=["bugs"])
app.include_router(submissions_router, prefix="/submissions", tags=["submissions"])

# Uploaded blobs, read-only, at the same path the public URLs point to
app.mount(
    STORAGE_PUBLIC_PATH,
    StaticFiles(directory=STORAGE_ROOT, check_dir=False),
    name="storage",
)
