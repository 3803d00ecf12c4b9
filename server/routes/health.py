"""Health check endpoint."""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends

from server.dependencies import get_orchestrator
from server.schemas.responses import HealthResponseDTO

router = APIRouter(tags=["Health"])

VERSION = "1.0.0"


@router.get("/health", response_model=HealthResponseDTO)
async def health_check(orchestrator=Depends(get_orchestrator)):
    """Liveness plus a summary of the answer configuration."""
    return HealthResponseDTO(
        status="healthy",
        timestamp=datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
        version=VERSION,
        model_pool_size=len(orchestrator.pool),
        credential_configured=orchestrator.has_credential,
    )
