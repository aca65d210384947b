"""
Kitchen Hand Guide FastAPI Application
Main entry point with logging setup and the uvicorn runner
"""

import logging
import uvicorn

from app.config import get_settings
from app.factory import create_app

settings = get_settings()

# Setup logging with configured level and format
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper()), format=settings.log_format
)

app = create_app(settings)


if __name__ == "__main__":
    uvicorn.run(
        "main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.is_development(),
        log_level=settings.log_level.lower(),
    )
