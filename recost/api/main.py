from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from ..core.logging import setup_logging
from ..core.config import settings
from ..core.errors import (
    ExtractionError,
    InvalidStateError,
    NotFoundError,
    PermissionDeniedError,
    RecostError,
    StorageError,
    UnknownUserError,
)
from .routers import auth, capture, health, inbox, invoices, preferences, properties

logger = setup_logging()
app = FastAPI(title="Recost Invoice Capture")

ERROR_STATUS = [
    (UnknownUserError, status.HTTP_401_UNAUTHORIZED),
    (PermissionDeniedError, status.HTTP_403_FORBIDDEN),
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (InvalidStateError, status.HTTP_409_CONFLICT),
    (ExtractionError, status.HTTP_400_BAD_REQUEST),
    (StorageError, status.HTTP_502_BAD_GATEWAY),
]


# Add custom exception handler for validation errors
@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    logger.error(f"Validation error: {exc.errors()}")
    logger.error(f"Request body: {await request.body()}")
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content=jsonable_encoder({"detail": exc.errors(), "body": str(await request.body())}),
    )


# Domain errors only expose their user-facing message; details go to the log
@app.exception_handler(RecostError)
async def recost_exception_handler(request: Request, exc: RecostError):
    status_code = next(
        (code for exc_type, code in ERROR_STATUS if isinstance(exc, exc_type)),
        status.HTTP_500_INTERNAL_SERVER_ERROR,
    )
    logger.warning(f"{type(exc).__name__} on {request.method} {request.url.path}: {str(exc)}")
    return JSONResponse(status_code=status_code, content={"detail": exc.user_message})


# Configure CORS to allow frontend access
# CORS_ORIGINS can be set in .env as comma-separated list
# Example: CORS_ORIGINS=http://localhost:3000,https://your-frontend.com
allowed_origins = [origin.strip() for origin in settings.cors_origins.split(",")]

app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router)
app.include_router(auth.router)
app.include_router(properties.router)
app.include_router(invoices.router)
app.include_router(capture.router)
app.include_router(inbox.router)
app.include_router(preferences.router)
