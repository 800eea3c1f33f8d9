"""
@file exceptions.py
@brief Domain exceptions and centralized exception handlers
@details
Defines the RoadWatch exception hierarchy raised by the road network loader,
the coordinate guard and the AHP model, and provides consistent JSON error
responses for HTTP exceptions, validation errors, domain errors and
unexpected server errors.

Degenerate inputs (empty network, empty observation list, zero-length
segments) are not errors and never reach these classes.

@author RoadWatch Project
@date 2026-10-19
@version 1.0
@license AGPL-3.0
"""

import logging
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException
from fastapi import Request

logger = logging.getLogger(__name__)


class RoadWatchError(Exception):
    """Base exception for all RoadWatch errors."""
    pass


class RoadNetworkError(RoadWatchError):
    """Raised when the reference road network cannot be loaded or is invalid."""
    pass


class InvalidCoordinateError(RoadWatchError, ValueError):
    """Raised when a coordinate is malformed or out of WGS84 range."""
    pass


class AHPMatrixError(RoadWatchError, ValueError):
    """Raised when a pairwise comparison matrix is not square, positive and reciprocal."""
    pass


class InconsistentMatrixError(AHPMatrixError):
    """
    Raised when a comparison matrix exceeds the allowed consistency ratio.

    Attributes:
        consistency_ratio (float): The computed CR of the rejected matrix
        threshold (float): The maximum CR that was allowed
    """

    def __init__(self, consistency_ratio: float, threshold: float):
        self.consistency_ratio = consistency_ratio
        self.threshold = threshold
        super().__init__(
            f"Comparison matrix is inconsistent: CR={consistency_ratio:.4f} "
            f"exceeds {threshold:.2f}"
        )


async def http_exception_handler(request: Request, exc: HTTPException):
    """
    @brief Custom HTTP exception handler
    @details Provides consistent error responses across the API.
    """
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error": str(exc.detail),
            "status_code": exc.status_code,
            "message": f"Request failed with HTTP {exc.status_code}"
        }
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """
    @brief Custom validation error handler
    @details Provides user-friendly validation error messages.
    """
    return JSONResponse(
        status_code=422,
        content={
            "error": "Validation error",
            "details": jsonable_encoder(exc.errors()),
            "message": "Request validation failed. Check parameters and try again."
        }
    )


async def roadwatch_exception_handler(request: Request, exc: RoadWatchError):
    """
    @brief Domain error handler for request payloads
    @details
    Registered for coordinate and AHP matrix errors, which are caused by the
    request and map to 422. RoadNetworkError is not registered; it
    propagates to NetworkUnavailableMiddleware, which answers 503.
    """
    return JSONResponse(
        status_code=422,
        content={
            "error": type(exc).__name__,
            "message": str(exc)
        }
    )


async def general_exception_handler(request: Request, exc: Exception):
    """
    @brief Catch-all exception handler
    @details
    Handles unexpected exceptions gracefully.
    Logs full error for debugging while returning safe message to client.
    """
    logger.exception(f"Unexpected error handling {request.url}: {exc}")

    return JSONResponse(
        status_code=500,
        content={
            "error": "Internal server error",
            "message": "An unexpected error occurred. Please try again later.",
            "status": "error"
        }
    )
