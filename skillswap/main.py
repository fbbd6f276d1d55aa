import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from .api.v1.api import router as api_router
from .core.config import get_settings
from .core.exceptions import SkillSwapError, StoreError

settings = get_settings()

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger("skillswap")

@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"Starting {settings.app_name} in {settings.environment} environment")
    if not settings.supabase_url or not settings.supabase_key:
        logger.warning("SUPABASE_URL / SUPABASE_KEY are not set; store calls will fail")

    yield

    logger.info("Shutting down")

app = FastAPI(
    title=settings.app_name,
    description="""
    API for the SkillSwap skill exchange marketplace.

    ## Authentication

    Every endpoint except the health checks, public profiles and skill lookups
    expects a Supabase access token in the `Authorization: Bearer <token>` header.
    Click "Authorize" and paste the token (without the "Bearer" prefix).

    ## Swap requests

    `pending` requests are accepted or rejected by the recipient and cancelled
    by the requester; `accepted` requests are completed by either side.
    Completed swaps can be rated once by each participant.
    """,
    version="1.0.0",
    debug=settings.debug,
    lifespan=lifespan,
    swagger_ui_parameters={
        "persistAuthorization": True,
        "displayRequestDuration": True,
        "defaultModelsExpandDepth": -1,
        "docExpansion": "none",
    }
)

# Configure CORS
# Default origins for development
origins = [
    "http://localhost:3000",
    "http://localhost:5173",
    "http://127.0.0.1:3000",
    "http://127.0.0.1:5173",
    settings.frontend_url,  # Include the frontend URL from environment
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include API router
app.include_router(api_router)

@app.get("/")
async def root():
    return {"message": f"Welcome to the {settings.app_name}", "environment": settings.environment}

@app.get("/health")
async def health_check():
    return {"status": "healthy", "environment": settings.environment}

@app.exception_handler(StoreError)
async def store_exception_handler(request: Request, exc: StoreError):
    # The store's own message can leak schema details; callers get a generic one.
    logger.error(f"{request.method} {request.url.path} failed in the data store: {exc.detail}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": "The data store could not complete the request. Please try again."}
    )

@app.exception_handler(SkillSwapError)
async def skillswap_exception_handler(request: Request, exc: SkillSwapError):
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail, "error": type(exc).__name__}
    )

# Add exception handler for validation errors
@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()

    for error in errors:
        # Point callers at the malformed id instead of a generic parse error
        if error.get("type") == "uuid_parsing":
            loc = error.get("loc", [])
            if len(loc) >= 2 and loc[0] == "path":
                return JSONResponse(
                    status_code=422,
                    content={
                        "detail": f"Invalid UUID format for {loc[1]}: '{error.get('input', '')}'. Please provide a valid UUID."
                    }
                )

    return JSONResponse(
        status_code=422,
        content={"detail": jsonable_encoder(errors)}
    )
