import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from ghcomments.config import settings
from ghcomments.database import init_db
from ghcomments.dependencies import render_message
from ghcomments.logging_config import setup_logging
from ghcomments.routers import comments, oauth

LOGGER = logging.getLogger(__name__)

app = FastAPI(title="GitHub Comments Backend")

app.add_middleware(
    CORSMiddleware,
    allow_origins=list(settings.cors_origins),
    allow_credentials=False,
    allow_methods=["GET"],
    allow_headers=["*"],
)

app.include_router(comments.router)
app.include_router(oauth.router)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": "Invalid request parameters"},
    )


@app.exception_handler(SQLAlchemyError)
async def storage_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    LOGGER.error("Storage failure on %s", request.url.path, exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error"},
    )


@app.on_event("startup")
def startup() -> None:
    setup_logging(settings.log_level, settings.log_format)
    init_db()


@app.get("/")
def root(request: Request):
    return render_message(request, "Welcome", "GitHub comment service is running.")


@app.get("/health")
def health():
    return {"status": "ok"}
