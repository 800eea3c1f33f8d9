"""
@file logging.py
@brief Centralized logging configuration
@details
Configures application logging with support for file and stdout output.
Safely handles log directory creation.

@author RoadWatch Project
@date 2026-10-19
@version 1.0
@license AGPL-3.0
"""

import logging
import sys
import os


def _resolve_log_dir():
    """
    @brief Pick a writable log directory or None
    @details LOG_DIR wins; otherwise a local logs/ beside the package.
    """
    log_dir = os.getenv("LOG_DIR", None)
    if log_dir is not None:
        return log_dir

    # this file is in roadwatch/core/, so back 2 levels is the project root
    base_dir = os.path.dirname(os.path.dirname(os.path.dirname(__file__)))
    log_dir = os.path.join(base_dir, "logs")
    if not os.path.exists(log_dir):
        try:
            os.makedirs(log_dir, exist_ok=True)
        except (OSError, PermissionError):
            return None
    return log_dir


def setup_logging() -> logging.Logger:
    """
    @brief Configure and return the application logger
    @details
    Sets up logging based on LOG_OUTPUT env var:
    - 'file': Write to logs/app.log
    - 'stdout': Write to console (default)
    - 'both': Write to both

    LOG_LEVEL selects the level (INFO when unset or unknown).
    """
    log_output = os.getenv("LOG_OUTPUT", "stdout").lower()
    level = getattr(logging, os.getenv("LOG_LEVEL", "INFO").upper(), logging.INFO)

    handlers = []

    # Stdout handler
    if log_output in ("stdout", "both"):
        handlers.append(logging.StreamHandler(sys.stdout))

    # File handler
    if log_output in ("file", "both"):
        log_dir = _resolve_log_dir()
        if log_dir:
            try:
                handlers.append(logging.FileHandler(os.path.join(log_dir, "app.log")))
            except (OSError, PermissionError):
                # If file logging fails, ensure we at least have stdout
                if not any(isinstance(h, logging.StreamHandler) for h in handlers):
                    handlers.append(logging.StreamHandler(sys.stdout))

    # Safety net
    if not handlers:
        handlers.append(logging.StreamHandler(sys.stdout))

    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(levelname)s - %(message)s",
        handlers=handlers
    )

    return logging.getLogger("roadwatch")
