"""
@file middleware.py
@brief Custom middleware for road network failures

@details
Road network errors raised while serving a request (a reload that finds an
unusable file) escape the exception handlers and are answered here with a
maintenance-mode 503. Every other exception continues to the catch-all
handler registered in main.

@author RoadWatch Project
@date 2026-10-19
@version 1.0
@license AGPL-3.0
"""

import logging
from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from roadwatch.core.exceptions import RoadNetworkError

logger = logging.getLogger(__name__)


class NetworkUnavailableMiddleware(BaseHTTPMiddleware):
    """
    @brief Middleware to catch road network errors and return maintenance responses

    @details
    Intercepts RoadNetworkError from POST /network/reload and returns 503.
    The previously loaded registry stays installed, so the other endpoints
    keep answering.
    """

    async def dispatch(self, request: Request, call_next):
        """
        @brief Process request and catch road network errors

        @param request The HTTP request
        @param call_next The next middleware/route handler
        @return Response or error response
        """
        try:
            response = await call_next(request)
            return response
        except RoadNetworkError as e:
            logger.error(f"Road network error handling {request.method} {request.url.path}: {e}")
            return JSONResponse(
                status_code=503,
                content={
                    "error": "Service unavailable",
                    "message": "Road network is unavailable. System is in maintenance mode.",
                    "detail": str(e),
                    "status": "unavailable"
                }
            )
