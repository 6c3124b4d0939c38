import os
from typing import Any, Dict, Optional

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from deadline_api.backend.errors import ServiceError, UnexpectedError
from deadline_api.backend.routers import deadlines, submissions
from deadline_api.database.db import init_db

structlog.configure(processors=[structlog.processors.TimeStamper(fmt="iso"), structlog.processors.JSONRenderer()])
log = structlog.get_logger()

app = FastAPI(title="Deadline Tracker", version="1.0.0")

allowed_origins = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
    os.getenv("FRONTEND_ORIGIN", "http://localhost:3000"),
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def envelope(message: str, *, error: Optional[str] = None, **extra: Any) -> Dict[str, Any]:
    body: Dict[str, Any] = {"success": False, "message": message}
    if error:
        body["error"] = error
    body.update(extra)
    return body


@app.exception_handler(ServiceError)
async def service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
    log.info("request_rejected", path=request.url.path, status=exc.status_code, reason=exc.message)
    return JSONResponse(status_code=exc.status_code, content=envelope(exc.message, error=exc.error, **exc.extra))


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = [
        {"loc": [str(part) for part in err.get("loc", ())], "msg": str(err.get("msg", "")).replace("Value error, ", "")}
        for err in exc.errors()
    ]
    message = "; ".join(e["msg"] for e in errors) or "Invalid request"
    return JSONResponse(status_code=400, content=envelope(message, errors=errors))


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=envelope(str(exc.detail)), headers=exc.headers)


@app.exception_handler(SQLAlchemyError)
async def store_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    log.error("store_error", path=request.url.path, error=str(exc))
    return await service_error_handler(request, UnexpectedError("Unexpected server error", error=str(exc)))


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
    log.error("unexpected_error", path=request.url.path, error=str(exc))
    return await service_error_handler(request, UnexpectedError("Unexpected server error", error=str(exc)))


@app.on_event("startup")
def on_startup() -> None:
    init_db()
    log.info("startup_complete")


@app.get("/health")
def healthcheck() -> Dict[str, Any]:
    return {"status": "ok"}


app.include_router(deadlines.router)
app.include_router(submissions.router)
