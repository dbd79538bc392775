import logging
import os
import time
from contextlib import asynccontextmanager

from fastapi import APIRouter, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from .database import Base, engine
from .domain.availability import public_router as public_availability_router
from .domain.availability import router as availability_router
from .domain.contracts import planner_contracts_router, public_router as contract_signing_router
from .domain.contract_templates import router as contract_templates_router
from .domain.contracts import router as contracts_router
from .domain.invoices import planner_invoices_router
from .domain.invoices import router as invoices_router
from .domain.planners import assignments_router, slots_router
from .domain.planners import router as planners_router
from .domain.reference import router as reference_router
from .routes.auth import router as auth_router
from .routes.status import router as status_router

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# Reduce verbosity of third-party libraries
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Application starting up...")
    Base.metadata.create_all(bind=engine, checkfirst=True)
    logger.info("Database tables created successfully")

    yield
    logger.info("Application shutting down...")


app = FastAPI(title="Gig Planner API", version="1.0.0", lifespan=lifespan)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    start = time.time()
    try:
        response = await call_next(request)
    except Exception as e:
        logger.error(f"{request.method} {request.url.path} - Error: {str(e)}")
        raise
    elapsed_ms = (time.time() - start) * 1000
    logger.debug(f"{request.method} {request.url.path} → {response.status_code} ({elapsed_ms:.0f}ms)")
    return response


# CORS Configuration
ALLOWED_ORIGINS = os.getenv(
    "ALLOWED_ORIGINS",
    "http://localhost:5173,http://localhost:3000",
).split(",")

logger.info(f"CORS allowed origins: {ALLOWED_ORIGINS}")

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS", "PATCH"],
    allow_headers=["*"],
    expose_headers=["Content-Disposition"],
)

# Routes - everything lives under /api
api_router = APIRouter(prefix="/api")
api_router.include_router(auth_router)
api_router.include_router(reference_router)
api_router.include_router(planners_router)
api_router.include_router(planner_invoices_router)
api_router.include_router(slots_router)
api_router.include_router(assignments_router)
api_router.include_router(planner_contracts_router)
api_router.include_router(contract_templates_router)
api_router.include_router(contracts_router)
api_router.include_router(contract_signing_router)
api_router.include_router(availability_router)
api_router.include_router(public_availability_router)
api_router.include_router(invoices_router)
api_router.include_router(status_router)
app.include_router(api_router)


@app.get("/")
def root():
    return {"message": "Gig Planner API is running"}


@app.get("/health")
def health():
    return {"status": "ok"}


@app.get("/health/redis")
async def redis_health_check():
    """Check Redis connectivity for monitoring"""
    try:
        from .cache import get_redis_client

        redis_client = get_redis_client()

        start_time = time.time()
        redis_client.ping()
        response_time = (time.time() - start_time) * 1000  # Convert to milliseconds

        info = redis_client.info()
        return {
            "status": "healthy",
            "redis": {
                "connected": True,
                "response_time_ms": round(response_time, 2),
                "version": info.get("redis_version", "unknown"),
            },
        }
    except Exception as e:
        return {"status": "unhealthy", "redis": {"connected": False, "error": str(e)}}
