"""Liveness check."""

from fastapi import APIRouter, status

router = APIRouter(prefix="/api/v1/health", tags=["health"])


@router.get("", status_code=status.HTTP_200_OK)
def health_check():
    """Returns 200 while the process is up."""
    return {"status": "healthy", "service": "coverdrop"}
