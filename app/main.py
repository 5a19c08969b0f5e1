from contextlib import asynccontextmanager
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from app.core.config import settings
from app.core.logging import LoggingMiddleware, get_logger, setup_logging, SERVICE_VERSION
from app.db import database
from app.routers import auth, users, reviews
from app.services.media_service import configure_cloudinary
from app.utils.exceptions import APIException, RepositoryError, validation_details

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    configure_cloudinary()
    # Create database tables
    await database.create_tables()
    logger.info("Application started", environment=settings.ENVIRONMENT)
    yield
    await database.engine.dispose()


# Create app
app = FastAPI(title="Restaurant Review API", version=SERVICE_VERSION, lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(LoggingMiddleware)


@app.exception_handler(APIException)
async def api_exception_handler(request: Request, exc: APIException):
    body = {"error_code": exc.error_code, "detail": exc.detail, **exc.extra}
    return JSONResponse(status_code=exc.status_code, content=body, headers=exc.headers)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "error_code": "VALIDATION_ERROR",
            "detail": "Validation failed",
            "details": validation_details(exc.errors()),
        },
    )


@app.exception_handler(RepositoryError)
async def repository_exception_handler(request: Request, exc: RepositoryError):
    logger.error("Repository failure", operation=exc.operation, error=str(exc))
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error_code": "REPOSITORY_ERROR",
            "detail": f"Error during review {exc.operation or 'operation'}",
            "details": str(exc),
        },
    )


@app.get("/health")
def health_check():
    """Basic health check endpoint"""
    return {"status": "healthy", "message": "Restaurant Review API is running"}


@app.get("/")
def root():
    """Root endpoint with API information"""
    return {
        "message": "Welcome to the Restaurant Review API",
        "version": SERVICE_VERSION,
        "docs": "/docs",
        "health": "/health"
    }

# Include routers
app.include_router(auth.router)
app.include_router(users.router)
app.include_router(reviews.router)
