from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from identity_service.api.deps import get_async_session
from identity_service.core.startup import is_schema_ready, last_schema_error
from identity_service.schemas.common import OkResponse
from identity_service.services.health import HealthService

router = APIRouter(prefix="/readyz", tags=["health"])


def _unavailable(code: str, message: str, detail: str | None = None) -> JSONResponse:
    payload = {"error": {"code": code, "message": message}}
    if detail:
        payload["error"]["detail"] = detail
    return JSONResponse(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, content=payload)


@router.get(
    "",
    response_model=OkResponse,
    summary="Readiness probe",
    description="503 until the users schema exists, then a query against it.",
)
async def readyz(session: AsyncSession = Depends(get_async_session)):
    if not is_schema_ready():
        return _unavailable(
            "schema_pending", "Database schema is not initialized", last_schema_error()
        )
    try:
        return await HealthService(session).ok()
    except SQLAlchemyError:
        return _unavailable("database_unavailable", "Database is not reachable")
