# jdqna/models/skill.py
import uuid

from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey, Enum, Index
from sqlalchemy.orm import relationship

from jdqna.db.session import Base
from jdqna.models.enums import SKILL_LEVELS, REQUIREMENTS, SKILL_CATEGORIES
from jdqna.models.timestamps import utcnow, isoformat


class Skill(Base):
    __tablename__ = "skills"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    record_id = Column(String(36), ForeignKey("skill_records.id", ondelete="CASCADE"), nullable=False)

    name = Column(String(255), nullable=False)
    level = Column(
        Enum(*SKILL_LEVELS, name="skill_level", native_enum=False),
        nullable=False,
        default="INTERMEDIATE",
    )
    requirement = Column(
        Enum(*REQUIREMENTS, name="skill_requirement", native_enum=False),
        nullable=False,
        default="MANDATORY",
    )
    category = Column(
        Enum(*SKILL_CATEGORIES, name="skill_category", native_enum=False),
        nullable=False,
        default="TECHNICAL",
    )
    priority = Column(Integer, nullable=False, default=0)
    num_questions = Column(Integer, nullable=False, default=1)
    difficulty = Column(String(20), nullable=True)          # Easy|Medium|Hard
    question_format = Column(String(50), nullable=True)     # Scenario, Coding, ...
    deleted = Column(Boolean, nullable=False, default=False)

    # FloCareer 연동
    flocareer_id = Column(Integer, nullable=True)
    flocareer_pool_id = Column(Integer, nullable=True)

    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    __table_args__ = (
        Index("ix_skills_record_id_priority", "record_id", "priority"),
    )

    # 관계 (스킬 삭제 시 질문/피드백/재생성 기록까지 함께 삭제)
    record = relationship("SkillRecord", back_populates="skills")
    questions = relationship(
        "Question",
        back_populates="skill",
        cascade="all, delete-orphan",
    )
    feedbacks = relationship(
        "Feedback",
        back_populates="skill",
        cascade="all, delete-orphan",
        order_by="Feedback.created_at.desc()",
    )
    regenerations = relationship(
        "Regeneration",
        back_populates="skill",
        cascade="all, delete-orphan",
    )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "recordId": self.record_id,
            "name": self.name,
            "level": self.level,
            "requirement": self.requirement,
            "category": self.category,
            "priority": self.priority,
            "numQuestions": self.num_questions,
            "difficulty": self.difficulty,
            "questionFormat": self.question_format,
            "deleted": bool(self.deleted),
            "floCareerId": self.flocareer_id,
            "floCareerPoolId": self.flocareer_pool_id,
            "createdAt": isoformat(self.created_at),
            "updatedAt": isoformat(self.updated_at),
        }
