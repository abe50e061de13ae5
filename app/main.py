from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from app.config import get_settings
from app.errors import CareerServiceError, career_service_error_handler
from app.middleware.correlation import CorrelationMiddleware
from app.routes import auth_callback, career_analysis, speech
from app.utils.logger import logger

settings = get_settings()

app = FastAPI(title=settings.app_name, version=settings.app_version)
app.add_exception_handler(CareerServiceError, career_service_error_handler)

# CORS - Explicit origins for security
allowed_origins = [origin.strip() for origin in settings.allowed_origins.split(",")]
app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization", "X-Correlation-ID"],
    expose_headers=["X-Correlation-ID"],
)
app.add_middleware(CorrelationMiddleware)


@app.on_event("startup")
async def startup_event():
    logger.info(f"Starting {settings.app_name} API...")
    missing = settings.missing_secrets()
    if missing:
        # Requests that need these fail with a generic "not configured" error
        logger.warning(f"Missing configuration: {', '.join(missing)}")
    logger.info(f"Backend ready at http://{settings.backend_host}:{settings.backend_port}")


# Health check endpoint (minimal response to prevent information disclosure)
@app.get("/health")
async def health_check():
    return {"status": "ok"}


@app.get("/")
async def root():
    return {"status": "ok"}


# Register routes
app.include_router(career_analysis.router, prefix="/api", tags=["Career Analysis"])
app.include_router(speech.router, prefix="/api", tags=["Text to Speech"])
app.include_router(auth_callback.router, prefix="/auth", tags=["Authentication"])

# Railway deployment - use railway.json startCommand instead
if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "app.main:app",
        host=settings.backend_host,
        port=settings.backend_port,
        reload=settings.debug
    )
