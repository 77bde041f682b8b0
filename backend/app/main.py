"""
School Records Backend - FastAPI Application Entry Point.

This is the main application module that:
1. Initializes the FastAPI app with CORS middleware
2. Sets up structured JSON logging
3. Implements request ID middleware (X-Request-ID header)
4. Registers the student and reference-data routes
5. Turns unexpected exceptions into sanitized 500 responses
6. Provides health check endpoint

Layout:
- routes/: API endpoint handlers
- services/: normalization, class/section validation, status policy,
  notifications and the StudentService orchestrator
- repositories/: SQLAlchemy queries for students and reference data
- models/: SQLAlchemy ORM models
"""

import time
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.logging_config import (
    setup_logging, get_logger, log_with_context,
    request_id_var, generate_request_id
)
from app.routes import students, reference
from app.database import DATABASE_URL, create_tables

# Import all models so they are registered with Base.metadata
from app.models import Role, User, UserProfile, SchoolClass, Section  # noqa: F401

# ──────────────────────────────────────────────────────────────
# Initialize structured logging BEFORE anything else
# ──────────────────────────────────────────────────────────────
setup_logging()
logger = get_logger("http")

# Auto-create tables for SQLite local development
if DATABASE_URL.startswith("sqlite"):
    logger.info("Using SQLite - creating tables directly")
    create_tables()

app = FastAPI(
    title="School Records Backend",
    description=(
        "Student records administration: list, add, update, view, "
        "enable/disable and delete student accounts, with class/section "
        "validation against the school's reference catalogs."
    ),
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc"
)

# The admin frontend runs on its own origin and authenticates with cookies
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Request-ID"]
)


@app.middleware("http")
async def request_id_middleware(request: Request, call_next):
    """
    Tag every request with a UUID.

    The ID is stored in a context variable (picked up by every log entry
    emitted while serving the request), returned in the X-Request-ID
    response header, and logged with the request latency.
    """
    req_id = generate_request_id()
    request_id_var.set(req_id)
    start_time = time.time()

    log_with_context(logger, "INFO",
        f"Request started: {request.method} {request.url.path}",
        context={"request_id": req_id},
        extra_data={
            "ip": request.client.host if request.client else "unknown",
            "user_agent": request.headers.get("user-agent", ""),
            "query_params": dict(request.query_params)
        })

    response = await call_next(request)

    duration_ms = (time.time() - start_time) * 1000
    response.headers["X-Request-ID"] = req_id

    log_with_context(logger, "INFO",
        f"Request completed: {request.method} {request.url.path} → {response.status_code}",
        context={"request_id": req_id},
        extra_data={
            "duration_ms": round(duration_ms, 2),
            "status_code": response.status_code
        })

    return response


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    """Log the real cause; the client only sees a generic message."""
    log_with_context(logger, "ERROR",
        f"Unhandled error on {request.method} {request.url.path}",
        exc_info=exc)
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


app.include_router(students.router, tags=["Students"])
app.include_router(reference.router, tags=["Reference Data"])


@app.get("/health", tags=["Health"])
def health_check():
    """Health check endpoint for Docker health checks and monitoring."""
    return {"status": "healthy", "service": "school-records-backend", "version": "1.0.0"}


@app.get("/", tags=["Root"])
def root():
    """Root endpoint with API information."""
    return {
        "service": "School Records Backend",
        "version": "1.0.0",
        "docs": "/docs",
        "health": "/health",
        "endpoints": {
            "students_list": "GET /api/v1/students",
            "student_add": "POST /api/v1/students",
            "student_detail": "GET /api/v1/students/{id}",
            "student_update": "PUT /api/v1/students/{id}",
            "student_status": "POST /api/v1/students/{id}/status",
            "student_delete": "DELETE /api/v1/students/{id}",
            "classes": "GET /api/v1/classes",
            "sections": "GET /api/v1/sections"
        }
    }
