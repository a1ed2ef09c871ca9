"""Health monitoring endpoints"""

import logging

from fastapi import APIRouter, Response, status
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from cfp.db.config import create_async_session
from cfp.schemas.health import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


async def check_database_available() -> str:
    """Check if database is available.

    Returns:
        str: "OK" if database is available, "NOK" otherwise
    """
    try:
        async with create_async_session() as session:
            await session.execute(text("SELECT 1"))
        return "OK"
    except (SQLAlchemyError, OSError) as e:
        logger.warning(f"Database health check failed: {e}")
        return "NOK"


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health check on application (incl. database)",
    description="Health check endpoint to verify if application (incl. database) is available",
    operation_id="health",
    include_in_schema=False,
    responses={
        200: {
            "description": "Health check passed",
            "content": {"application/json": {"example": {"database_available": "OK"}}},
        },
        422: {
            "description": "Health check failed - database NOK",
            "content": {"application/json": {"example": {"database_available": "NOK"}}},
        },
    },
)
async def health(response: Response) -> HealthResponse:
    database_available = await check_database_available()

    if database_available == "NOK":
        response.status_code = status.HTTP_422_UNPROCESSABLE_CONTENT
    else:
        response.status_code = status.HTTP_200_OK

    return HealthResponse(database_available=database_available)
