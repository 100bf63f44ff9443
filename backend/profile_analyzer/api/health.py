from fastapi import APIRouter

router = APIRouter()


@router.get("")
async def health_check():
    """Liveness check."""
    return {"status": "healthy"}
