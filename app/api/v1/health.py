from fastapi import APIRouter

router = APIRouter()


@router.get("/health", summary="Health Check", description="Liveness probe for the resume match API.")
async def health_check():
    return {"status": "healthy"}
