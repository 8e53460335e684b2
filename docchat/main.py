"""Main application entry point.

Runs the FastAPI host with the NiceGUI client mounted on it. The host listens
on PORT (default 8080); the backend it talks to defaults to port 8000
(API_BASE_URL), so both can run side by side on one machine.
Environment variables are loaded from .env file.
"""

import logging
import os
import sys

from dotenv import load_dotenv

# Load environment variables before any other imports that might need them
load_dotenv()

# Configure logging
logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
)
logger = logging.getLogger(__name__)

DEFAULT_PORT = 8080


def host_port() -> int:
    """Port for the integrated host, from PORT or DEFAULT_PORT."""
    return int(os.getenv("PORT", str(DEFAULT_PORT)))


def run_integrated() -> None:
    """Run the NiceGUI client mounted on the FastAPI host.

    FastAPI serves /health, NiceGUI serves the interface.
    Both accessible on the same port.
    """
    import uvicorn
    from nicegui import ui

    from docchat.ui.app_page import docchat_page  # noqa: F401 - Registers the page
    from docchat.ui.host import create_app

    app = create_app()

    ui.run_with(
        app,
        title="DocChat",
        storage_secret=os.getenv("NICEGUI_STORAGE_SECRET", "docchat-secret"),
    )

    port = host_port()
    logger.info(f"Client UI available at http://localhost:{port}/")

    uvicorn.run(
        app,
        host=os.getenv("HOST", "0.0.0.0"),
        port=port,
        log_level=os.getenv("LOG_LEVEL", "info").lower(),
    )


def run_standalone() -> None:
    """Run NiceGUI's own server on port 8080 without the FastAPI host."""
    from docchat.ui.app_page import main as run_page

    run_page()


def main() -> None:
    """Application entry point.

    Set RUN_MODE=standalone to run NiceGUI on its own server.
    Default is integrated mode.
    """
    mode = os.getenv("RUN_MODE", "integrated").lower()

    logger.info(f"Starting DocChat client in {mode} mode")

    if mode == "standalone":
        run_standalone()
    else:
        run_integrated()


if __name__ in {"__main__", "__mp_main__"}:
    main()
