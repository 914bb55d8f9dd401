from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from rent_tracker.core.dependencies import get_db, get_session_epoch
from rent_tracker.core.security import SessionEpoch
from rent_tracker.services.system_services import check_db_service, system_health, system_metrics

router = APIRouter()

@router.get("/health")
async def health(epoch: SessionEpoch = Depends(get_session_epoch)):
    return await system_health(epoch)

@router.get("/health/db")
async def check_db():
    return await check_db_service()

@router.get("/metrics")
async def metrics(db: AsyncSession = Depends(get_db)):
    return await system_metrics(db)
