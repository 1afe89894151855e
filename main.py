import logging
import sys
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse

from repo_ingest.config import CORS_ORIGINS, LOG_FILE, LOG_LEVEL
from repo_ingest.routes.github_ingestion import router as github_ingestion_router
from repo_ingest.services.github_ingestion_service import github_ingestion_service

# Configure logging to ensure all logs are visible
handlers = [logging.StreamHandler(sys.stdout)]
if LOG_FILE:
    handlers.append(logging.FileHandler(LOG_FILE, mode='a'))

logging.basicConfig(
    level=LOG_LEVEL,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=handlers
)

# Set specific loggers
logger = logging.getLogger(__name__)
logging.getLogger('uvicorn').setLevel(LOG_LEVEL)
logging.getLogger('uvicorn.access').setLevel(LOG_LEVEL)

app = FastAPI(
    title="GitHub ZIP Ingestion API",
    description="Downloads GitHub branch snapshots and extracts source files as documents for RAG indexing",
    version="1.0.0"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=list(CORS_ORIGINS),
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(github_ingestion_router, tags=["github_ingestion"])


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    logger.warning(f"[MAIN] Rejected malformed request body on {request.url.path}: {exc.errors()}")
    return JSONResponse(status_code=400, content={"error": "Invalid request body"})


@app.get("/", response_class=PlainTextResponse)
async def root():
    logger.info("[MAIN] Root endpoint accessed")
    return "GitHub ZIP ingestion tool is running"


@app.get("/health")
async def health_check():
    logger.info("[MAIN] Health check endpoint accessed")
    return {"status": "healthy"}


@app.on_event("shutdown")
async def shutdown_tasks():
    logger.info("[SHUTDOWN] Stopping ingestion worker pool")
    github_ingestion_service.shutdown()


logger.info("[MAIN] FastAPI application initialized successfully")
