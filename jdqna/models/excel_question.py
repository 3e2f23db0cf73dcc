# jdqna/models/excel_question.py
import uuid

from sqlalchemy import Column, Integer, String, Text, Boolean, DateTime, ForeignKey, Index
from sqlalchemy.orm import relationship
from sqlalchemy.types import JSON

from jdqna.db.session import Base
from jdqna.models.timestamps import utcnow, isoformat


class ExcelQuestionSet(Base):
    """시트 형식(일련번호/제목/설명/모범답안) 질문 묶음"""

    __tablename__ = "excel_question_sets"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    job_title = Column(String(255), nullable=False)
    experience_range = Column(String(100), nullable=False)
    total_questions = Column(Integer, nullable=False, default=0)
    skills_extracted = Column(JSON, nullable=False, default=lambda: [])  # 스킬 이름 목록
    raw_job_description = Column(Text, nullable=True)
    record_id = Column(String(36), ForeignKey("skill_records.id", ondelete="SET NULL"), nullable=True)

    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    questions = relationship(
        "ExcelQuestion",
        back_populates="question_set",
        cascade="all, delete-orphan",
        order_by="ExcelQuestion.sl_no",
    )
    record = relationship("SkillRecord")

    def to_dict(self, include_questions: bool = True) -> dict:
        data = {
            "id": self.id,
            "jobTitle": self.job_title,
            "experienceRange": self.experience_range,
            "totalQuestions": self.total_questions,
            "skillsExtracted": list(self.skills_extracted or []),
            "rawJobDescription": self.raw_job_description,
            "recordId": self.record_id,
            "createdAt": isoformat(self.created_at),
            "updatedAt": isoformat(self.updated_at),
        }
        if include_questions:
            data["questions"] = [q.to_dict() for q in self.questions]
        return data


class ExcelQuestion(Base):
    __tablename__ = "excel_questions"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    set_id = Column(String(36), ForeignKey("excel_question_sets.id", ondelete="CASCADE"), nullable=False)
    sl_no = Column(Integer, nullable=False)
    skill = Column(String(255), nullable=False, default="")
    question_title = Column(Text, nullable=False, default="")
    question_description = Column(Text, nullable=False, default="")
    ideal_answer = Column(Text, nullable=False, default="")  # HTML
    coding = Column(Boolean, nullable=False, default=False)

    created_at = Column(DateTime, nullable=False, default=utcnow)

    __table_args__ = (
        Index("ix_excel_questions_set_id_sl_no", "set_id", "sl_no"),
    )

    question_set = relationship("ExcelQuestionSet", back_populates="questions")

    def to_dict(self) -> dict:
        return {
            "slNo": self.sl_no,
            "skill": self.skill,
            "questionTitle": self.question_title,
            "questionDescription": self.question_description,
            "idealAnswer": self.ideal_answer,
            "coding": self.coding,
        }
