# 모든 모델을 한 번에 import 해서 Base.metadata 에 등록
from jdqna.models.skill_record import SkillRecord
from jdqna.models.skill import Skill
from jdqna.models.question import Question
from jdqna.models.regeneration import Regeneration
from jdqna.models.feedback import Feedback, GlobalFeedback
from jdqna.models.excel_question import ExcelQuestionSet, ExcelQuestion

__all__ = [
    "SkillRecord",
    "Skill",
    "Question",
    "Regeneration",
    "Feedback",
    "GlobalFeedback",
    "ExcelQuestionSet",
    "ExcelQuestion",
]
