# identity_service/api/routers/healthz.py
from fastapi import APIRouter

from identity_service.schemas.common import OkResponse

router = APIRouter(prefix="/healthz", tags=["health"])


@router.get(
    "",
    response_model=OkResponse,
    summary="Liveness probe",
    description="Always 200 while the process is serving; no database access.",
)
async def healthz():
    return {"ok": True}
