# jdqna/services/flocareer_service.py
"""
FloCareer (외부 ATS) 연동

1) create-interview-structure: 스킬별 질문 풀을 만들어 FloCareer 에 전송
2) req-details 동기화: FloCareer 쪽 스킬/질문 상태를 로컬 레코드에 반영
"""
import logging
from collections import OrderedDict
from typing import Any, Dict, List, Optional

import requests
from sqlalchemy.orm import Session

from jdqna.config import settings
from jdqna.models import Question, SkillRecord
from jdqna.services.errors import FloCareerError

logger = logging.getLogger("jdqna.flocareer")


class FloCareerClient:
    """requests 기반 FloCareer REST 클라이언트"""

    def __init__(self, base_url: Optional[str] = None, timeout: Optional[float] = None, session=None):
        self.base_url = (base_url or settings.flocareer_base_url).rstrip("/")
        self.timeout = timeout or settings.flocareer_timeout
        self.session = session or requests.Session()

    def create_interview_structure(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        url = f"{self.base_url}/create-interview-structure/"
        try:
            resp = self.session.post(url, json=payload, timeout=self.timeout)
        except requests.RequestException as e:
            raise FloCareerError(f"FloCareer API error: {e}") from e
        if not resp.ok:
            raise FloCareerError(f"FloCareer API error: {resp.status_code}")
        return resp.json()

    def get_req_details(self, req_id: int, user_id: int) -> Dict[str, Any]:
        url = f"{self.base_url}/req-details/{req_id}/{user_id}/"
        try:
            resp = self.session.get(
                url,
                headers={"Accept": "application/json"},
                timeout=self.timeout,
                allow_redirects=False,
            )
        except requests.RequestException as e:
            raise FloCareerError(f"FloCareer API error: {e}") from e
        if not resp.ok or resp.is_redirect:
            raise FloCareerError(f"FloCareer API error: {resp.status_code}")
        return resp.json()


# ------------------------
# 문자열 -> enum 매핑
# ------------------------
def map_requirement(requirement: Optional[str]) -> Optional[str]:
    if not requirement:
        return None
    normalized = requirement.lower()
    if "must" in normalized:
        return "MANDATORY"
    if "should" in normalized or "nice" in normalized:
        return "OPTIONAL"
    return None


def map_level(level: Optional[str]) -> Optional[str]:
    if not level:
        return None
    normalized = level.lower()
    if normalized.startswith(("entry", "begin")):
        return "BEGINNER"
    if normalized.startswith("inter"):
        return "INTERMEDIATE"
    if normalized.startswith("prof"):
        return "PROFESSIONAL"
    if normalized.startswith("expert"):
        return "EXPERT"
    return None


# ------------------------
# 질문 풀 생성
# ------------------------
def build_question_pools(record: SkillRecord) -> List[Dict[str, Any]]:
    """
    스킬마다
    - 활성 질문(floCareerId 보유) -> pool_id 0, action "add"
    - soft delete 된 질문 -> 기존 pool_id 별로 묶어서 action "delete"
    """
    pools: List[Dict[str, Any]] = []
    for skill in record.skills:
        pushed = [q for q in skill.questions if q.flocareer_id]
        if not pushed:
            continue

        active = [q for q in pushed if not q.deleted]
        if active:
            pools.append({
                "pool_id": 0,
                "action": "add",
                "name": skill.name,
                "num_of_questions_to_ask": len(active),
                "questions": [q.flocareer_id for q in active],
            })

        by_pool: "OrderedDict[int, List[int]]" = OrderedDict()
        for q in pushed:
            if q.deleted and q.flocareer_pool_id:
                by_pool.setdefault(q.flocareer_pool_id, []).append(q.flocareer_id)
        for pool_id, question_ids in by_pool.items():
            pools.append({
                "pool_id": pool_id,
                "action": "delete",
                "name": skill.name,
                "num_of_questions_to_ask": len(question_ids),
                "questions": question_ids,
            })
    return pools


def create_interview_structure(db: Session, record: SkillRecord, client: FloCareerClient) -> Dict[str, Any]:
    if not record.req_id or not record.user_id:
        raise FloCareerError("Missing reqId or userId for FloCareer integration", status_code=400)

    pools = build_question_pools(record)
    if not pools:
        raise FloCareerError("No questions or deleted questions with FloCareer IDs found", status_code=400)

    payload = {
        "user_id": record.user_id,
        "round_id": record.round_id or record.req_id,
        "question_pools": pools,
    }
    logger.info("creating interview structure for record %s (%d pools)", record.id, len(pools))
    result = client.create_interview_structure(payload)

    if not result.get("success"):
        raise FloCareerError(result.get("error_string") or "Failed to create interview structure", status_code=500)

    # 응답의 pool_id 를 질문에 저장
    for pool in result.get("question_pools") or []:
        for item in pool.get("questions") or []:
            if not isinstance(item, dict) or not item.get("ai_question_id") or not item.get("question_id"):
                continue
            question = (
                db.query(Question)
                .filter(Question.record_id == record.id, Question.flocareer_id == item["question_id"])
                .first()
            )
            if question:
                question.flocareer_pool_id = pool.get("pool_id")

    return {"data": result, "questionPools": pools}


# ------------------------
# req-details 동기화
# ------------------------
def sync_req_details(db: Session, record: SkillRecord, details: Dict[str, Any]) -> Dict[str, Any]:
    rounds = details.get("rounds") if isinstance(details.get("rounds"), list) else []
    if not rounds:
        raise FloCareerError("No rounds found in FloCareer response", status_code=422)

    # 레코드의 round_id 와 같은 라운드 우선, 없으면 첫 번째
    selected = next((r for r in rounds if r.get("round_id") == record.round_id), rounds[0])
    remote_skills = selected.get("skill_matrix") or []
    remote_pools = selected.get("question_pools") or []

    # 1) 스킬
    remote_by_ai_id = {}
    for s in remote_skills:
        ai_id = (s.get("ai_skill_id") or "").strip()
        if ai_id:
            remote_by_ai_id[ai_id] = s

    skill_changes = {"undeleted": 0, "deleted": 0, "updated": 0}
    for local in record.skills:
        remote = remote_by_ai_id.get(local.id)
        if remote is None:
            if not local.deleted:
                local.deleted = True
                skill_changes["deleted"] += 1
            continue

        changed = False
        if local.deleted:
            local.deleted = False
            skill_changes["undeleted"] += 1
            changed = True
        if remote.get("skill_id") and local.flocareer_id != remote["skill_id"]:
            local.flocareer_id = remote["skill_id"]
            changed = True
        requirement = map_requirement(remote.get("requirement"))
        if requirement and local.requirement != requirement:
            local.requirement = requirement
            changed = True
        level = map_level(remote.get("level"))
        if level and local.level != level:
            local.level = level
            changed = True
        if remote.get("name") and remote["name"] != local.name:
            local.name = remote["name"]
            changed = True
        if changed:
            skill_changes["updated"] += 1

    # 2) 질문 (FloCareer 에 올라간 질문만)
    remote_pool_of: Dict[int, int] = {}
    for pool in remote_pools:
        for q in pool.get("questions") or []:
            if isinstance(q, dict) and q.get("question_id") is not None:
                remote_pool_of[q["question_id"]] = pool.get("pool_id")

    question_changes = {"undeleted": 0, "deleted": 0, "poolSet": 0}
    for q in record.questions:
        if not q.flocareer_id:
            continue
        if q.flocareer_id in remote_pool_of:
            if q.deleted:
                q.deleted = False
                question_changes["undeleted"] += 1
            desired_pool = remote_pool_of[q.flocareer_id] or q.flocareer_pool_id
            if desired_pool and q.flocareer_pool_id != desired_pool:
                q.flocareer_pool_id = desired_pool
                question_changes["poolSet"] += 1
        elif not q.deleted:
            q.deleted = True
            question_changes["deleted"] += 1

    logger.info(
        "synced record %s with FloCareer round %s: skills=%s questions=%s",
        record.id, selected.get("round_id"), skill_changes, question_changes,
    )
    return {
        "skills": skill_changes,
        "questions": question_changes,
        "recordId": record.id,
        "roundId": selected.get("round_id"),
    }
