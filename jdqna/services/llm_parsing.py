# jdqna/services/llm_parsing.py
"""
LLM 질문 응답 파서 (2단계)

1) json.loads 로 구조화 파싱
2) 실패하면 정규식으로 필드만 긁어오고, 없는 필드는 기본값으로 채움

어느 경로든 항상 유효한 질문 dict 를 돌려준다.
"""
import json
import re
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

CODING_KEYWORDS = ("code", "algorithm", "programming")

DEFAULT_QUESTION_TEXT = "Generated question"
DEFAULT_ANSWER_TEXT = "Generated answer"
DEFAULT_CATEGORY = "Technical"
DEFAULT_DIFFICULTY = "Medium"
DEFAULT_FORMAT = "Scenario"

SCRAPED_FIELDS = ("question", "answer", "category", "difficulty", "questionFormat")


@dataclass
class ParsedQuestion:
    data: Dict[str, Any] = field(default_factory=dict)
    fallback: bool = False  # True 면 정규식 경로로 만들어진 결과


def is_coding_question(question: Optional[Dict[str, Any]]) -> bool:
    """명시 플래그 OR 포맷이 Coding OR 본문 키워드"""
    if not isinstance(question, dict):
        return False
    if question.get("coding") is True:
        return True
    fmt = question.get("questionFormat")
    if isinstance(fmt, str) and fmt.strip().lower() == "coding":
        return True
    text = question.get("question")
    if isinstance(text, str):
        lowered = text.lower()
        return any(k in lowered for k in CODING_KEYWORDS)
    return False


def _pick_question_object(parsed: Any) -> Optional[Dict[str, Any]]:
    if not isinstance(parsed, dict):
        return None
    inner = parsed.get("question")
    if isinstance(inner, dict):
        return inner
    if isinstance(inner, str):
        return parsed
    questions = parsed.get("questions")
    if isinstance(questions, list) and questions and isinstance(questions[0], dict):
        return questions[0]
    return None


def _scrape_field(content: str, name: str) -> Optional[str]:
    match = re.search(r'"%s"\s*:\s*"((?:[^"\\]|\\.)*)"' % re.escape(name), content)
    if not match:
        return None
    raw = match.group(1)
    try:
        return json.loads(f'"{raw}"')
    except ValueError:
        return raw


def _defaults(fallback: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    fallback = fallback or {}
    return {
        "question": DEFAULT_QUESTION_TEXT,
        "answer": DEFAULT_ANSWER_TEXT,
        "category": fallback.get("category") or DEFAULT_CATEGORY,
        "difficulty": fallback.get("difficulty") or DEFAULT_DIFFICULTY,
        "questionFormat": fallback.get("questionFormat") or DEFAULT_FORMAT,
    }


def normalize_question(obj: Dict[str, Any], fallback: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    base = _defaults(fallback)
    result = {}
    for key, default in base.items():
        value = obj.get(key)
        result[key] = value if isinstance(value, str) and value.strip() else default
    if isinstance(obj.get("skillName"), str):
        result["skillName"] = obj["skillName"]
    result["coding"] = is_coding_question({**result, "coding": obj.get("coding")})
    return result


def parse_question_completion(
    content: Optional[str],
    fallback: Optional[Dict[str, Any]] = None,
) -> ParsedQuestion:
    """
    Args:
        content: LLM 원문 응답
        fallback: 원본 질문 content (category/difficulty/questionFormat 기본값으로 사용)
    """
    content = content or ""

    # 1) JSON 파싱
    try:
        obj = _pick_question_object(json.loads(content))
    except ValueError:
        obj = None
    if obj is not None:
        return ParsedQuestion(data=normalize_question(obj, fallback), fallback=False)

    # 2) 정규식 스크래핑
    scraped = {}
    for name in SCRAPED_FIELDS:
        value = _scrape_field(content, name)
        if value is not None:
            scraped[name] = value
    if re.search(r'"coding"\s*:\s*true', content):
        scraped["coding"] = True

    return ParsedQuestion(data=normalize_question(scraped, fallback), fallback=True)


def parse_json_object(content: Optional[str]) -> Any:
    """JSON 파싱, 실패 시 가장 바깥 {...} 블록만 추출해서 재시도"""
    if not content:
        raise ValueError("empty content")
    try:
        return json.loads(content)
    except ValueError:
        match = re.search(r"\{[\s\S]*\}", content)
        if not match:
            raise
        return json.loads(match.group(0))
