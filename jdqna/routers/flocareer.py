from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from jdqna.deps import get_db, get_flocareer, json_body
from jdqna.models import SkillRecord
from jdqna.services import flocareer_service as svc_flo
from jdqna.services.flocareer_service import FloCareerClient

router = APIRouter(prefix="/api/records", tags=["flocareer"])


def _as_int(value):
    if isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


# (1) FloCareer 동기화
# POST /api/records/sync-req-details   body: {req, userId}
@router.post("/sync-req-details")
def sync_req_details(
    payload: dict = Depends(json_body),
    db: Session = Depends(get_db),
    client: FloCareerClient = Depends(get_flocareer),
):
    req_raw = payload.get("req")
    user_raw = payload.get("userId", payload.get("userid", payload.get("user_id")))
    if req_raw is None or user_raw is None:
        raise HTTPException(status_code=400, detail="'req' and 'userId' are required in body")

    req_id, user_id = _as_int(req_raw), _as_int(user_raw)
    if req_id is None or user_id is None:
        raise HTTPException(status_code=400, detail="'req' and 'userId' must be numbers")

    record = (
        db.query(SkillRecord)
        .filter(SkillRecord.req_id == req_id, SkillRecord.user_id == user_id)
        .order_by(SkillRecord.created_at.desc())
        .first()
    )
    if record is None:
        raise HTTPException(status_code=404, detail="SkillRecord not found for provided req and userId")

    details = client.get_req_details(req_id, user_id)
    summary = svc_flo.sync_req_details(db, record, details)
    return {
        "success": True,
        "message": "Synchronized with FloCareer req details",
        "summary": summary,
    }


# (2) 질문 풀 생성/삭제를 FloCareer 에 전송
# POST /api/records/{record_id}/create-interview-structure
@router.post("/{record_id}/create-interview-structure")
def create_interview_structure(
    record_id: str,
    db: Session = Depends(get_db),
    client: FloCareerClient = Depends(get_flocareer),
):
    record = db.get(SkillRecord, record_id)
    if record is None:
        raise HTTPException(status_code=404, detail="Record not found")

    result = svc_flo.create_interview_structure(db, record, client)
    return {
        "success": True,
        "message": "Interview structure created successfully in FloCareer",
        **result,
    }
