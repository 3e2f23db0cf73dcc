# jdqna/models/skill_record.py
import uuid

from sqlalchemy import Column, Integer, String, Text, DateTime, Index
from sqlalchemy.orm import relationship

from jdqna.db.session import Base
from jdqna.models.timestamps import utcnow, isoformat


class SkillRecord(Base):
    """JD 분석 세션 1건 (스킬/질문의 소유자)"""

    __tablename__ = "skill_records"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    job_title = Column(String(255), nullable=False)
    raw_job_description = Column(Text, nullable=True)
    interview_length = Column(Integer, nullable=False, default=60)  # 분
    custom_instructions = Column(Text, nullable=True)

    # FloCareer 연동
    req_id = Column(Integer, nullable=True)
    user_id = Column(Integer, nullable=True)
    round_id = Column(Integer, nullable=True)

    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    __table_args__ = (
        Index("ix_skill_records_req_id_user_id", "req_id", "user_id"),
    )

    # 관계
    skills = relationship(
        "Skill",
        back_populates="record",
        cascade="all, delete-orphan",
        order_by="Skill.priority",
    )
    questions = relationship(
        "Question",
        back_populates="record",
        cascade="all, delete-orphan",
    )
    global_feedback = relationship(
        "GlobalFeedback",
        back_populates="record",
        uselist=False,
        cascade="all, delete-orphan",
    )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "jobTitle": self.job_title,
            "rawJobDescription": self.raw_job_description,
            "interviewLength": self.interview_length,
            "customInstructions": self.custom_instructions,
            "reqId": self.req_id,
            "userId": self.user_id,
            "roundId": self.round_id,
            "createdAt": isoformat(self.created_at),
            "updatedAt": isoformat(self.updated_at),
        }
