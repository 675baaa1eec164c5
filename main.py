import os
import signal
import sys
from pathlib import Path

import uvicorn
from dotenv import load_dotenv

# Load .env before reading PORT/HOST/ENVIRONMENT
env_path = Path(__file__).resolve().parent / ".env"
if env_path.exists():
    load_dotenv(env_path)

from taskboard.utils.config import load_settings
from taskboard.utils.exceptions import ConfigError


if __name__ == "__main__":
    """
    Entry point for Taskboard.
    Serves the REST API with uvicorn using the web.main:create_app factory.
    """
    try:
        settings = load_settings()
    except ConfigError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        sys.exit(1)

    ENVIRONMENT = settings.app.environment.lower()
    RELOAD = ENVIRONMENT == "development"
    WORKERS = int(os.getenv("WORKERS", "1")) if ENVIRONMENT == "production" else 1

    if WORKERS > 1 and settings.storage.backend == "json":
        print("The json storage backend is single-process; starting one worker.", file=sys.stderr)
        WORKERS = 1

    print(f"Starting Taskboard ({ENVIRONMENT}) with {settings.storage.backend} storage")
    print(f"API available at http://{settings.web.host}:{settings.web.port}")

    def signal_handler(sig, frame):
        print("\nShutdown signal received. Stopping server...")
        sys.exit(0)

    if hasattr(signal, "SIGTERM"):
        signal.signal(signal.SIGTERM, signal_handler)

    try:
        uvicorn.run(
            "web.main:create_app",
            factory=True,
            host=settings.web.host,
            port=settings.web.port,
            reload=RELOAD,
            workers=WORKERS,
            log_level="info" if ENVIRONMENT == "production" else "debug",
        )
    except KeyboardInterrupt:
        print("\nShutdown complete.")
