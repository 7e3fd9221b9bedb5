"""
CareerFlow - Main Application

FastAPI backend with:
- MongoDB for users, jobs, community, resources and sessions
- Hosted generative model (OpenAI-compatible API) for the AI coach
- JWT authentication

Run: uvicorn careerflow.main:app --reload
"""

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pymongo.errors import PyMongoError

from careerflow import __version__
from careerflow.api import api_router
from careerflow.core.config import get_settings
from careerflow.core.exceptions import AppError, ServiceUnavailable
from careerflow.core.logging_config import get_logger, setup_logging
from careerflow.db.mongodb import create_mongo_client, init_mongo_indexes, test_mongo_connection
from careerflow.services.coach_client import CoachClient

settings = get_settings()
logger = get_logger(__name__)

REQUEST_LOCATIONS = ("body", "query", "path", "header", "cookie")

# Create FastAPI app
app = FastAPI(
    title="CareerFlow",
    description="""
    Career platform API.

    ## Features
    - **Authentication**: JWT-based auth for job seekers and career counselors
    - **Jobs**: Counselors post jobs, job seekers apply, counselors export applicants
    - **Community**: Forum posts, replies and likes
    - **Resources**: Shared articles, videos and templates
    - **Sessions**: Counseling session requests and scheduling
    - **AI Coach**: Chat, career paths, resume feedback, fit scores, path plans
    """,
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include API routes
app.include_router(api_router, prefix="/api")


# ============================================================
# ERROR HANDLERS
# ============================================================

@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    if isinstance(exc, ServiceUnavailable) and exc.detail:
        logger.error("%s %s unavailable: %s", request.method, request.url.path, exc.detail)
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = []
    for err in exc.errors():
        loc = list(err.get("loc", ()))
        # only the leading element names the request location
        if loc and loc[0] in REQUEST_LOCATIONS:
            loc = loc[1:]
        loc = [str(part) for part in loc]
        message = err.get("msg", "Invalid value")
        if message.startswith("Value error, "):
            message = message[len("Value error, "):]
        errors.append({"field": ".".join(loc), "message": message})

    message = errors[0]["message"] if errors else "Invalid request payload"
    return JSONResponse(status_code=400, content={"message": message, "errors": errors})


@app.exception_handler(PyMongoError)
async def store_error_handler(request: Request, exc: PyMongoError):
    logger.error("%s %s store error: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=503, content=ServiceUnavailable().to_dict())


# ============================================================
# LIFECYCLE
# ============================================================

@app.on_event("startup")
async def startup_event():
    """Open the store, create indexes and build the AI client."""
    setup_logging(settings.log_level)

    app.state.mongo_client = create_mongo_client()
    app.state.db = app.state.mongo_client[settings.mongodb_db]
    try:
        init_mongo_indexes(app.state.db)
        logger.info("MongoDB indexes initialized")
    except PyMongoError as e:
        logger.warning("MongoDB index initialization failed: %s", e)

    if settings.ai_api_key:
        app.state.coach_client = CoachClient.from_settings(settings)
        logger.info("AI client configured for model %s", settings.ai_model)
    else:
        app.state.coach_client = None
        logger.warning("AI_API_KEY is not set; AI endpoints will return 503")


@app.on_event("shutdown")
async def shutdown_event():
    client = getattr(app.state, "coach_client", None)
    if client is not None:
        client.close()
    mongo_client = getattr(app.state, "mongo_client", None)
    if mongo_client is not None:
        mongo_client.close()
    logger.info("CareerFlow shut down")


@app.get("/health", tags=["Health"])
def health_check(request: Request):
    """Store reachability and whether the AI client is configured."""
    db = getattr(request.app.state, "db", None)
    return {
        "status": "healthy",
        "mongodb": "connected" if db is not None and test_mongo_connection(db) else "disconnected",
        "ai": "configured" if getattr(request.app.state, "coach_client", None) is not None else "not configured",
    }
