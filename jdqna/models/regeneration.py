# jdqna/models/regeneration.py
import uuid

from sqlalchemy import Column, String, Text, DateTime, ForeignKey, Enum, Index
from sqlalchemy.orm import relationship

from jdqna.db.session import Base
from jdqna.models.enums import LIKE_STATUSES
from jdqna.models.timestamps import utcnow, isoformat


class Regeneration(Base):
    """원본 질문 -> 새 질문 재생성 이력"""

    __tablename__ = "regenerations"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    original_question_id = Column(String(36), ForeignKey("questions.id", ondelete="CASCADE"), nullable=False)
    new_question_id = Column(String(36), ForeignKey("questions.id", ondelete="CASCADE"), nullable=False)
    record_id = Column(String(36), ForeignKey("skill_records.id", ondelete="CASCADE"), nullable=False)
    skill_id = Column(String(36), ForeignKey("skills.id", ondelete="CASCADE"), nullable=False)

    reason = Column(Text, nullable=True)
    user_feedback = Column(Text, nullable=True)
    liked = Column(
        Enum(*LIKE_STATUSES, name="regeneration_like_status", native_enum=False),
        nullable=False,
        default="NONE",
    )

    created_at = Column(DateTime, nullable=False, default=utcnow)

    __table_args__ = (
        Index("ix_regenerations_original_new", "original_question_id", "new_question_id"),
        Index("ix_regenerations_record_id_created_at", "record_id", "created_at"),
    )

    original_question = relationship(
        "Question", foreign_keys=[original_question_id], back_populates="regenerations_from"
    )
    new_question = relationship(
        "Question", foreign_keys=[new_question_id], back_populates="regenerations_to"
    )
    skill = relationship("Skill", back_populates="regenerations")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "originalQuestionId": self.original_question_id,
            "newQuestionId": self.new_question_id,
            "recordId": self.record_id,
            "skillId": self.skill_id,
            "reason": self.reason,
            "userFeedback": self.user_feedback,
            "liked": self.liked,
            "createdAt": isoformat(self.created_at),
        }
