# jdqna/services/analytics_service.py
from collections import OrderedDict
from datetime import timedelta
from typing import Any, Dict, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from jdqna.models import Feedback, Question, Regeneration, Skill, SkillRecord
from jdqna.models.timestamps import isoformat, utcnow

TREND_DAYS = 30


def average_per_question(total_regenerations: int, total_questions: int) -> float:
    """소수 둘째 자리 반올림, 질문이 없으면 0"""
    if total_questions <= 0:
        return 0
    return round(total_regenerations / total_questions, 2)


def regeneration_analytics(
    db: Session,
    record_id: Optional[str] = None,
    skill_id: Optional[str] = None,
    limit: int = 10,
) -> Dict[str, Any]:
    filters = []
    if record_id:
        filters.append(Regeneration.record_id == record_id)
    if skill_id:
        filters.append(Regeneration.skill_id == skill_id)

    # 1) 전체 재생성 수
    total_regenerations = db.query(func.count(Regeneration.id)).filter(*filters).scalar() or 0

    # 2) 스킬별 재생성 수 (상위 limit)
    by_skill = (
        db.query(Regeneration.skill_id, Skill.name, func.count(Regeneration.id).label("cnt"))
        .outerjoin(Skill, Skill.id == Regeneration.skill_id)
        .filter(*filters)
        .group_by(Regeneration.skill_id, Skill.name)
        .order_by(func.count(Regeneration.id).desc())
        .limit(limit)
        .all()
    )
    most_regenerated = [
        {"skillId": sid, "skillName": name or "Unknown", "regenerationCount": cnt}
        for sid, name, cnt in by_skill
    ]

    # 3) 최근 30일 일별 추이
    since = utcnow() - timedelta(days=TREND_DAYS)
    created = (
        db.query(Regeneration.created_at)
        .filter(*filters, Regeneration.created_at >= since)
        .order_by(Regeneration.created_at.asc())
        .all()
    )
    trends: "OrderedDict[str, int]" = OrderedDict()
    for (created_at,) in created:
        day = created_at.date().isoformat()
        trends[day] = trends.get(day, 0) + 1

    # 4) 사유별 빈도
    reasons = (
        db.query(Regeneration.reason, func.count(Regeneration.id))
        .filter(*filters, Regeneration.reason.isnot(None))
        .group_by(Regeneration.reason)
        .order_by(func.count(Regeneration.id).desc())
        .all()
    )

    # 5) 만족도
    satisfaction = {"liked": 0, "disliked": 0, "neutral": 0}
    for liked, cnt in db.query(Regeneration.liked, func.count(Regeneration.id)).filter(*filters).group_by(Regeneration.liked):
        if liked == "LIKED":
            satisfaction["liked"] = cnt
        elif liked == "DISLIKED":
            satisfaction["disliked"] = cnt
        else:
            satisfaction["neutral"] += cnt

    # 6) 최근 재생성
    recent = (
        db.query(Regeneration)
        .filter(*filters)
        .order_by(Regeneration.created_at.desc())
        .limit(limit)
        .all()
    )

    # 7) 질문당 평균
    q = db.query(func.count(Question.id))
    if record_id:
        q = q.filter(Question.record_id == record_id)
    elif skill_id:
        q = q.filter(Question.skill_id == skill_id)
    total_questions = q.scalar() or 0

    return {
        "summary": {
            "totalRegenerations": total_regenerations,
            "averageRegenerationsPerQuestion": average_per_question(total_regenerations, total_questions),
            "totalQuestions": total_questions,
        },
        "mostRegeneratedSkills": most_regenerated,
        "regenerationTrends": [{"date": d, "count": c} for d, c in trends.items()],
        "regenerationReasons": [{"reason": r, "count": c} for r, c in reasons],
        "userSatisfaction": satisfaction,
        "recentRegenerations": [
            {
                "id": r.id,
                "skillName": r.skill.name if r.skill else "Unknown",
                "reason": r.reason,
                "liked": r.liked,
                "createdAt": isoformat(r.created_at),
                "hasUserFeedback": bool(r.user_feedback),
            }
            for r in recent
        ],
    }


def dashboard_summary(db: Session) -> Dict[str, Any]:
    def _count(model) -> int:
        return db.query(func.count(model.id)).scalar() or 0

    likes = dict(db.query(Question.liked, func.count(Question.id)).group_by(Question.liked).all())
    levels = db.query(Skill.level, func.count(Skill.id)).group_by(Skill.level).all()
    categories = db.query(Skill.category, func.count(Skill.id)).group_by(Skill.category).all()

    recent = db.query(SkillRecord).order_by(SkillRecord.updated_at.desc()).limit(5).all()

    return {
        "statistics": {
            "totalRecords": _count(SkillRecord),
            "totalSkills": _count(Skill),
            "totalQuestions": _count(Question),
            "totalFeedbacks": _count(Feedback),
            "questionLikes": {
                "liked": likes.get("LIKED", 0),
                "disliked": likes.get("DISLIKED", 0),
                "neutral": likes.get("NONE", 0),
            },
            "skillLevelDistribution": [{"level": lv, "count": c} for lv, c in levels],
            "skillCategoryDistribution": [{"category": cat, "count": c} for cat, c in categories],
        },
        "recentActivity": [
            {
                **r.to_dict(),
                "skills": [{"name": s.name, "level": s.level, "category": s.category} for s in r.skills],
                "questionCount": len(r.questions),
            }
            for r in recent
        ],
    }
