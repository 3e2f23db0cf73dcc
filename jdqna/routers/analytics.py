from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from jdqna.deps import get_db
from jdqna.services import analytics_service as svc_analytics

router = APIRouter(prefix="/api", tags=["analytics"])


# GET /api/analytics/regenerations?recordId=&skillId=&limit=10
@router.get("/analytics/regenerations")
def regeneration_analytics(
    record_id: Optional[str] = Query(None, alias="recordId"),
    skill_id: Optional[str] = Query(None, alias="skillId"),
    limit: int = Query(10, ge=1, le=100),
    db: Session = Depends(get_db),
):
    analytics = svc_analytics.regeneration_analytics(db, record_id=record_id, skill_id=skill_id, limit=limit)
    return {"success": True, "analytics": analytics}


# GET /api/dashboard
@router.get("/dashboard")
def dashboard(db: Session = Depends(get_db)):
    return {"success": True, **svc_analytics.dashboard_summary(db)}
