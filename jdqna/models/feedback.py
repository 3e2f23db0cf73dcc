# jdqna/models/feedback.py
import uuid

from sqlalchemy import Column, String, Text, DateTime, ForeignKey
from sqlalchemy.orm import relationship

from jdqna.db.session import Base
from jdqna.models.timestamps import utcnow, isoformat


class Feedback(Base):
    """스킬 단위 자유 피드백 (질문과 무관)"""

    __tablename__ = "feedbacks"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    skill_id = Column(String(36), ForeignKey("skills.id", ondelete="CASCADE"), nullable=False, index=True)
    content = Column(Text, nullable=False)
    created_at = Column(DateTime, nullable=False, default=utcnow)

    skill = relationship("Skill", back_populates="feedbacks")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "skillId": self.skill_id,
            "content": self.content,
            "createdAt": isoformat(self.created_at),
        }


class GlobalFeedback(Base):
    """레코드당 최대 1건 (record_id unique)"""

    __tablename__ = "global_feedbacks"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    record_id = Column(String(36), ForeignKey("skill_records.id", ondelete="CASCADE"), nullable=False, unique=True)
    content = Column(Text, nullable=False)
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    record = relationship("SkillRecord", back_populates="global_feedback")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "recordId": self.record_id,
            "content": self.content,
            "createdAt": isoformat(self.created_at),
            "updatedAt": isoformat(self.updated_at),
        }
