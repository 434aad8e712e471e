"""
Centralized logging utility.

One logger factory for both processes: the API logs under the ``API``
component, the NiceGUI frontend under ``FRONTEND``, each with its own
level variable.
"""

import logging
import os
import sys
from typing import Optional

LEVEL_ENV_VARS = {
    "API": "VETNIKO_LOG_LEVEL",
    "FRONTEND": "VETNIKO_FRONTEND_LOG_LEVEL",
}


def get_logger(name: Optional[str] = None, component: str = "API") -> logging.Logger:
    """
    Create or retrieve a configured logger instance.

    Args:
        name (Optional[str]): Logger name (usually __name__).
        component (str): ``"API"`` or ``"FRONTEND"``; selects the level
            variable and tags every line.

    Returns:
        logging.Logger: Configured logger instance.
    """
    logger = logging.getLogger(name)
    level_var = LEVEL_ENV_VARS.get(component, "VETNIKO_LOG_LEVEL")
    logger.setLevel(os.getenv(level_var, "INFO").upper())

    # Uvicorn and NiceGUI both import page modules more than once
    if logger.handlers:
        return logger

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        logging.Formatter(
            fmt=f"%(asctime)s | %(levelname)-8s | {component} | %(name)s | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )
    logger.addHandler(handler)
    logger.propagate = False

    return logger
