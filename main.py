import os
import uvicorn
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

# Settings for running
PORT = int(os.getenv('PORT', 5050))
DEBUG = os.getenv('DEBUG', 'False').lower() == 'true'
LOG_LEVEL = os.getenv('LOG_LEVEL', 'info').lower()

# Import FastAPI app
from app import app
from backend.core.logging import get_logger

# Expose application for ASGI servers
application = app

logger = get_logger("campaign-dispatch")

if __name__ == "__main__":
    logger.info(f"Starting server on port {PORT}, debug={DEBUG}")

    uvicorn.run(
        "app:app",
        host="0.0.0.0",
        port=PORT,
        log_level=LOG_LEVEL,
        reload=DEBUG,
        timeout_keep_alive=120,
    )
