from fastapi import APIRouter, status

router = APIRouter(tags=["health"])


@router.get("/health", status_code=status.HTTP_200_OK)
async def healthcheck():
    """Liveness check for the orchestrator."""
    return {"status": "Healthy"}
