"""
Production entrypoint for the Income Appraisal Engine.

Binds to 0.0.0.0:$PORT.
"""

import logging
import os

import uvicorn

from utils.logging import setup_logging

if __name__ == "__main__":
    setup_logging(os.getenv("LOG_LEVEL", "INFO"))
    port = int(os.getenv("PORT", "8000"))
    logging.getLogger(__name__).info("Starting Income Appraisal Engine on port %s", port)

    # Import app here to ensure clean module loading
    from web.app import app

    uvicorn.run(app, host="0.0.0.0", port=port, log_config=None)
