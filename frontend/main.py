"""
Application entrypoint and route definitions.

Registers the consultation page and starts the NiceGUI app.
"""

from nicegui import ui

from app.vet_service.utils.logger import get_logger
from frontend.config import settings
from frontend.pages.consultation_page import show_consultation_page

logger = get_logger(__name__, component="FRONTEND")


@ui.page("/")
def root() -> None:
    """Consultation page route."""
    logger.debug("Consultation page accessed")
    show_consultation_page()


def start_app() -> None:
    """
    Start the NiceGUI application.
    """
    logger.info(
        "Starting Vet Niko frontend application",
        extra={"api_base_url": settings.API_BASE_URL},
    )

    ui.run(
        title="Vet Niko",
        reload=False,
        storage_secret=settings.STORAGE_SECRET,
    )


if __name__ in {"__main__", "__mp_main__"}:
    start_app()
