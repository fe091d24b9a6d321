from fastapi import APIRouter
from pydantic import BaseModel

from ..lib.signals import list_generators

router = APIRouter(tags=["health"])


class HealthResponse(BaseModel):
    status: str
    signals: list[str]


@router.get("/health", response_model=HealthResponse, status_code=200)
async def healthcheck():
    return {"status": "ok", "signals": [s.value for s in list_generators()]}
