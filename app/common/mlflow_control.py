import os
import mlflow
from typing import Any, Callable, Optional
from contextlib import contextmanager

from app.vet_service.utils.logger import get_logger

logger = get_logger(__name__)


def mlflow_enabled() -> bool:
    """
    MLflow tracking is active only outside tests and only when a
    tracking server has been configured.
    """
    if os.getenv("VETNIKO_ENV") == "test":
        return False
    return bool(os.getenv("MLFLOW_TRACKING_URI"))


@contextmanager
def mlflow_context(run_name: str | None = None):
    """
    MLflow run lifecycle handler.

    - Starts a run if none is active, otherwise reuses the active one
    - Runs started here are always ended
    - MLflow failures do not crash the consultation flow

    Args:
        run_name (str | None):
            Optional MLflow run name for easier identification in the UI.
    """
    if not mlflow_enabled():
        logger.debug("MLflow disabled")
        yield None
        return

    started_here = False
    run = None

    try:
        run = mlflow.active_run()
        if run is None:
            run = mlflow.start_run(run_name=run_name)
            started_here = True
            logger.debug(
                "MLflow run started",
                extra={"run_id": run.info.run_id, "run_name": run_name},
            )
    except Exception:
        logger.warning("Could not start MLflow run", exc_info=True)
        run = None

    try:
        yield run
    finally:
        if started_here:
            try:
                if mlflow.active_run():
                    mlflow.end_run()
            except Exception:
                logger.exception("Failed to end MLflow run")


def mlflow_safe(
    func: Callable[..., Any],
    *args: Any,
    swallow: bool = True,
    **kwargs: Any,
) -> Optional[Any]:
    """
    Safely execute an MLflow function call.

    Logging failures never break the calling service; they are logged
    and suppressed unless ``swallow`` is False.

    Args:
        func: The MLflow function to execute (e.g. ``mlflow.set_tag``).
        *args: Positional arguments for the MLflow function.
        swallow: Re-raise after logging when False.
        **kwargs: Keyword arguments for the MLflow function.

    Returns:
        The return value of the MLflow function, or None when skipped
        or failed.
    """
    if not mlflow_enabled():
        return None

    try:
        return func(*args, **kwargs)

    except Exception:
        logger.warning(
            "MLflow call failed: %s | args=%s kwargs=%s",
            getattr(func, "__name__", func),
            args,
            kwargs,
            exc_info=True,
        )

        if not swallow:
            raise

        return None
