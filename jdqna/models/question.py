# jdqna/models/question.py
import json
import uuid

from sqlalchemy import Column, Integer, String, Text, Boolean, DateTime, ForeignKey, Enum, Index
from sqlalchemy.orm import relationship

from jdqna.db.session import Base
from jdqna.models.enums import LIKE_STATUSES
from jdqna.models.timestamps import utcnow, isoformat


class Question(Base):
    __tablename__ = "questions"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    record_id = Column(String(36), ForeignKey("skill_records.id", ondelete="CASCADE"), nullable=False)
    skill_id = Column(String(36), ForeignKey("skills.id", ondelete="CASCADE"), nullable=False)

    # {"question", "answer", "category", "difficulty", "questionFormat", "coding"} JSON 문자열
    content = Column(Text, nullable=False)
    coding = Column(Boolean, nullable=False, default=False)

    liked = Column(
        Enum(*LIKE_STATUSES, name="like_status", native_enum=False),
        nullable=False,
        default="NONE",
    )
    feedback = Column(Text, nullable=True)

    # soft delete
    deleted = Column(Boolean, nullable=False, default=False)
    deleted_feedback = Column(Text, nullable=True)

    # FloCareer 연동
    flocareer_id = Column(Integer, nullable=True)
    flocareer_pool_id = Column(Integer, nullable=True)

    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    __table_args__ = (
        Index("ix_questions_record_id_skill_id", "record_id", "skill_id"),
    )

    # 관계
    record = relationship("SkillRecord", back_populates="questions")
    skill = relationship("Skill", back_populates="questions")
    regenerations_from = relationship(
        "Regeneration",
        foreign_keys="Regeneration.original_question_id",
        back_populates="original_question",
        cascade="all, delete-orphan",
    )
    regenerations_to = relationship(
        "Regeneration",
        foreign_keys="Regeneration.new_question_id",
        back_populates="new_question",
        cascade="all, delete-orphan",
    )

    @property
    def content_dict(self) -> dict:
        """content JSON 파싱 (깨진 값이면 빈 dict)"""
        try:
            data = json.loads(self.content or "{}")
        except (TypeError, ValueError):
            return {}
        return data if isinstance(data, dict) else {}

    def set_content(self, data: dict) -> None:
        self.content = json.dumps(data, ensure_ascii=False)

    @property
    def text(self) -> str:
        return self.content_dict.get("question") or ""

    def to_dict(self, include_skill: bool = False) -> dict:
        data = {
            "id": self.id,
            "recordId": self.record_id,
            "skillId": self.skill_id,
            "content": self.content,
            "coding": bool(self.coding),
            "liked": self.liked,
            "feedback": self.feedback,
            "deleted": bool(self.deleted),
            "deletedFeedback": self.deleted_feedback,
            "floCareerId": self.flocareer_id,
            "floCareerPoolId": self.flocareer_pool_id,
            "createdAt": isoformat(self.created_at),
            "updatedAt": isoformat(self.updated_at),
        }
        if include_skill and self.skill is not None:
            data["skill"] = self.skill.to_dict()
        return data
