#!/usr/bin/env python3

import uvicorn
import logging

from repo_ingest.config import HOST, PORT, RELOAD, LOG_LEVEL

# Setup basic logging for the runner
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

if __name__ == "__main__":
    logger.info(f"[RUNNER] Starting FastAPI server on {HOST}:{PORT}")
    logger.info(f"[RUNNER] Reload mode: {RELOAD}")
    logger.info(f"[RUNNER] Ingestion API will be available at: http://{HOST}:{PORT}/ingest")

    uvicorn.run(
        "main:app",
        host=HOST,
        port=PORT,
        reload=RELOAD,
        log_level=LOG_LEVEL.lower()
    )
