from fastapi import APIRouter

router = APIRouter()


@router.get("/")
async def read_root():
    return {"name": "SkillSwap API", "docs": "/docs"}


@router.get("/health")
async def health():
    return {"status": "ok"}
