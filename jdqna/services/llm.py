"""
스킬 추출 / 면접 질문 생성 / 재생성 Service (OpenAI API)
"""
import logging
from typing import Any, Dict, List, Optional, Sequence, Tuple

from openai import OpenAI, OpenAIError

from jdqna.config import settings
from jdqna.services.errors import LLMError
from jdqna.services.llm_parsing import (
    ParsedQuestion,
    parse_json_object,
    parse_question_completion,
)

logger = logging.getLogger("jdqna.llm")

QUESTION_FORMATS_BLOCK = """1. "Open-ended" - Requires a descriptive or narrative answer. Useful for assessing communication, reasoning, or opinion-based responses.
2. "Coding" - Candidate writes or debugs code. Used for evaluating problem-solving skills, algorithms, and programming language proficiency.
3. "Scenario" - Presents a short, realistic situation and asks how the candidate would respond or act. Tests decision-making, ethics, soft skills, or role-specific judgment.
4. "Case Study" - In-depth problem based on a real or simulated business/technical challenge. Requires analysis, synthesis of information, and a structured response. Often multi-step.
5. "Design" - Asks the candidate to architect a system, process, or solution. Often used in software/system design, business process optimization, or operational planning.
6. "Live Assessment" - Real-time tasks like pair programming, whiteboarding, or collaborative exercises. Tests real-world working ability and communication under pressure."""

LEVEL_EXPECTATIONS_BLOCK = """Expectations based on experience level:
- BEGINNER: Focus on foundational concepts, simple application, definitions, and basic logic.
- INTERMEDIATE: Mix of conceptual and applied questions, moderate coding tasks, and situational judgment.
- PROFESSIONAL: Emphasize real-world problem solving, architecture/design, optimization, decision-making, and advanced coding or domain-specific knowledge.
- EXPERT: Probe deep trade-offs, system-level thinking, and leadership of technical decisions."""

SINGLE_QUESTION_OUTPUT_BLOCK = """Format your response as a JSON object with a 'question' key containing a single question object, where the object has:
1. A "question" field with the interview question (must not exceed 400 characters)
2. A "answer" field with a suggested model answer for the interviewer (should be comprehensive)
3. A "category" field with one of: "Technical", "Experience", "Problem Solving", or "Soft Skills"
4. A "difficulty" field with "{difficulty}"
5. A "skillName" field with "{skill_name}"
6. A "questionFormat" field with one of: "Open-ended", "Coding", "Scenario", "Case Study", "Design", or "Live Assessment"
7. A "coding" field with a boolean value: true if the questionFormat is "Coding" OR if the question involves writing, debugging, or analyzing code, false otherwise"""


def effective_difficulty(level: Optional[str], difficulty: Optional[str]) -> str:
    """difficulty 가 없으면 레벨로 매핑"""
    if difficulty:
        return difficulty
    if level in ("PROFESSIONAL", "EXPERT"):
        return "Hard"
    if level == "INTERMEDIATE":
        return "Medium"
    return "Easy"


def _numbered(items: Sequence[str]) -> str:
    return "\n".join(f"{i + 1}. {item}" for i, item in enumerate(items))


# ------------------------
# 프롬프트 빌더
# ------------------------
def build_skill_extraction_messages(job_title: str, job_description: str) -> List[Dict[str, str]]:
    system = """You are a skilled recruiter analyzing job descriptions to extract required skills for interviews.
Extract skills from the job description and categorize them by:
- Importance: high (required) or low (preferred/optional)
- Level: BEGINNER, INTERMEDIATE, PROFESSIONAL, or EXPERT
- Category: TECHNICAL, FUNCTIONAL, BEHAVIORAL, or COGNITIVE
- Difficulty: Easy, Medium, or Hard

Return a JSON object with a 'skills' array, where each skill has:
- name: The skill name
- importance: high or low
- level: BEGINNER, INTERMEDIATE, PROFESSIONAL, or EXPERT
- category: TECHNICAL, FUNCTIONAL, BEHAVIORAL, or COGNITIVE
- difficulty: Easy, Medium, or Hard"""
    user = (
        f"Job Title: {job_title}\n\nJob Description:\n{job_description}\n\n"
        "Extract the key skills needed for this role."
    )
    return [
        {"role": "system", "content": system},
        {"role": "user", "content": user},
    ]


def build_skill_names_prompt(job_description: str) -> str:
    return f"""Extract all technical skills, frameworks, libraries, tools, and technologies from the following job description.
Return the result as a JSON object with a "skills" key containing an array of strings with only the skill names.
Be comprehensive and include all relevant technical skills mentioned.

Job Description:
{job_description}

For example:
{{"skills": ["JavaScript", "React", "Node.js", "TypeScript", "AWS"]}}"""


def build_role_questions_prompt(job_role: str, job_description: str, custom_instructions: Optional[str] = None) -> str:
    prompt = f"""You are an expert interviewer for technical roles.
Based on the following job description for a {job_role} position, generate 8-10 relevant interview questions with suggested answers.
The questions should assess both technical knowledge and soft skills relevant to the role.
Each question should be challenging but fair, focusing on the key requirements in the job description.

Job Description:
{job_description}
"""
    if custom_instructions:
        prompt += f"\nAdditional Instructions:\n{custom_instructions}\n"

    prompt += """
Format your response as a JSON object with a 'questions' key containing an array of question objects, where each object has:
1. A "question" field with the interview question
2. A "answer" field with a suggested model answer for the interviewer
3. A "category" field with one of: "Technical", "Experience", "Problem Solving", or "Soft Skills"
4. A "difficulty" field with one of: "Easy", "Medium", or "Hard"
"""
    return prompt


def build_single_question_prompt(
    skill_name: str,
    level: str,
    difficulty: Optional[str],
    existing_questions: Sequence[str] = (),
    feedback: Sequence[str] = (),
    force_coding: bool = False,
) -> str:
    difficulty = effective_difficulty(level, difficulty)

    feedback_section = ""
    if feedback:
        feedback_section = (
            "\n\nCRITICAL FEEDBACK - YOU MUST FOLLOW THIS STRICTLY:\n"
            f"{_numbered(feedback)}\n\n"
            "IMPORTANT: The new question MUST address and incorporate this feedback."
        )

    existing_section = ""
    if existing_questions:
        existing_section = (
            "\n\nEXISTING QUESTIONS (avoid generating similar questions):\n"
            f"{_numbered(existing_questions)}\n\n"
            "Generate a completely different and unique question."
        )

    if force_coding:
        format_section = (
            'IMPORTANT: You MUST choose the "Coding" question format for this question. '
            "The candidate must write or debug code to answer this question."
        )
    else:
        format_section = (
            "Randomly choose one of these question formats and design the question accordingly:\n"
            + QUESTION_FORMATS_BLOCK
        )

    output_section = SINGLE_QUESTION_OUTPUT_BLOCK.format(difficulty=difficulty, skill_name=skill_name)

    return f"""Generate exactly 1 unique interview question for the skill "{skill_name}" at a {level} level ({difficulty} difficulty).
The question should be challenging but fair, testing both theoretical knowledge and practical application.{feedback_section}{existing_section}

{LEVEL_EXPECTATIONS_BLOCK}

{format_section}

{output_section}

Make sure the question matches the specified difficulty level, is appropriate for the skill, follows the chosen question format, and is completely unique from any existing questions."""


def build_regeneration_prompt(
    skill_name: str,
    level: str,
    difficulty: Optional[str],
    original_question: str,
    reason: Optional[str] = None,
    standing_feedback: Optional[str] = None,
) -> str:
    prompt = f'Generate a new interview question for the skill "{skill_name}" at {level} level.'
    prompt += f"\nOriginal question: {original_question}"

    if reason:
        prompt += f'\n\nReason for regeneration: "{reason}"'
        prompt += "\nPlease address this specific concern in the new question."

    if standing_feedback:
        prompt += f'\n\nUser feedback on original question: "{standing_feedback}"'
        prompt += (
            "\n\nPlease use this feedback to greatly improve the question. "
            "The feedback is very important and should guide your response."
        )
    else:
        prompt += "\nPlease generate a different question for this skill."

    if difficulty:
        prompt += f"\nDifficulty level: {difficulty}"

    prompt += (
        "\n\nFor the question format, randomly choose one of these and design the question accordingly:\n"
        + QUESTION_FORMATS_BLOCK
        + '\n\nIMPORTANT: The "coding" field must be set to true when questionFormat is "Coding"'
    )
    return prompt


def build_batch_questions_prompt(job_role: str, skills: Sequence[Any], custom_instructions: Optional[str] = None) -> str:
    skill_lines = _numbered(
        [
            f"{s.name} ({s.level} level, {s.difficulty or 'Medium'} difficulty, {s.num_questions} questions)"
            for s in skills
        ]
    )
    prompt = f"""Generate interview questions for a {job_role} position based on these skills:
{skill_lines}

Generate questions for each skill according to the number specified in parentheses.

For each question, randomly choose one of these question formats and design the question accordingly:
{QUESTION_FORMATS_BLOCK}

Each question should:
- Be relevant to the skill
- Match the appropriate difficulty level
- Include a detailed suggested answer for the interviewer
- Be categorized as either Technical, Experience, Problem Solving, or Soft Skills
- Follow the chosen question format
- Include a "coding" field set to true if questionFormat is "Coding", false otherwise.

IMPORTANT: FOR EACH SKILL, GENERATE EITHER ALL CODING QUESTIONS OR ALL NON-CODING QUESTIONS, NOT A MIX.

Return a JSON object with a 'questions' array; each object has question, answer, skillName (must match one of the provided skills exactly), category, difficulty, questionFormat and coding."""
    if custom_instructions:
        prompt += f"\n\nAdditional instructions: {custom_instructions}"
    return prompt


CATEGORY_LABELS = {
    "TECHNICAL": "Technical",
    "FUNCTIONAL": "Functional",
    "BEHAVIORAL": "Behavioral",
    "COGNITIVE": "Cognitive",
}


def build_feedback_regeneration_prompt(
    skill_name: str,
    level: str,
    difficulty: Optional[str],
    category: Optional[str],
    questions_with_feedback: Sequence[Tuple[str, Optional[str]]],
    global_feedback: Optional[str] = None,
) -> str:
    """
    스킬의 현재 질문 + 질문별 피드백 (+ 레코드 전체 피드백) -> 같은 개수의 개선 질문

    questions_with_feedback: (질문 텍스트, 피드백 또는 None) 목록
    """
    current = "\n".join(
        f"\nQuestion {i + 1}: {text}\n" + (f"Feedback: {feedback}" if feedback else "No specific feedback")
        for i, (text, feedback) in enumerate(questions_with_feedback)
    )
    global_section = f"\n\nGLOBAL FEEDBACK FOR ALL QUESTIONS: {global_feedback}" if global_feedback else ""

    return f"""Generate improved interview questions for the skill "{skill_name}" at {level} level.
Difficulty: {difficulty or 'Medium'}
Category: {CATEGORY_LABELS.get(category or '', 'Technical')}

For each question, randomly choose one of these question formats and design the question accordingly:
{QUESTION_FORMATS_BLOCK}
{global_section}

CURRENT QUESTIONS WITH FEEDBACK:
{current}

Please generate exactly {len(questions_with_feedback)} new and improved questions based on the feedback provided.
Format your response as a JSON object with a 'questions' array where each object has: question, answer, category, difficulty, questionFormat and coding fields.
Category should be one of: Technical, Experience, Problem Solving, Soft Skills, Functional, Behavioral, Cognitive.
Difficulty should be one of: Easy, Medium, Hard.
QuestionFormat should be one of: Open-ended, Coding, Scenario, Case Study, Design, Live Assessment."""


QUESTIONS_PER_SKILL = 3
DEFAULT_EXPERIENCE_RANGE = "8 to 10 years"


def build_sheet_questions_prompt(skills: Sequence[str], experience_range: str = DEFAULT_EXPERIENCE_RANGE) -> str:
    """시트 형식 질문 (slNo/skill/questionTitle/questionDescription/idealAnswer/coding), 스킬당 3개"""
    skills_list = "\n".join(f"{i + 1}. {name}" for i, name in enumerate(skills))
    return f"""As a question generator for interviews, generate scenario-based technical questions with short ideal answers for the skills listed below.
Do not wait for confirmation. Generate the full set in one go. No previews or samples.

Instructions:
Generate {QUESTIONS_PER_SKILL} questions under each skill listed below.
Each question should be scenario-based and suitable for a candidate with {experience_range} of experience.
Include code snippets where applicable.
Ideal Answer must be CKEditor-compatible HTML:
Use <br> for line breaks
Use <ul><li> for bullet points
Wrap code or script blocks using <pre><code>...</code></pre>
Escape newlines within <pre><code> blocks using \\n
All fields should be strings and safe for database storage.
Experience Range: {experience_range}

Skill List:
{skills_list}

Format your response as a JSON object with a 'questions' array where each object has:
- slNo: Sequential number starting from 1
- skill: The skill name
- questionTitle: First sentence of the question
- questionDescription: Full question content
- idealAnswer: CKEditor-compatible HTML formatted answer
- coding: true if the question involves writing, debugging or analyzing code, false otherwise

IMPORTANT: Generate exactly {QUESTIONS_PER_SKILL} questions per skill. Each question should be unique and scenario-based."""


class QuestionLLM:
    """OpenAI API를 사용한 스킬 추출 / 질문 생성"""

    def __init__(self, client=None, model: Optional[str] = None, extraction_model: Optional[str] = None):
        self.client = client or OpenAI(api_key=settings.openai_api_key, timeout=settings.openai_timeout)
        self.model = model or settings.openai_model
        self.extraction_model = extraction_model or settings.openai_extraction_model

    def _complete(self, messages: List[Dict[str, str]], model: Optional[str] = None, temperature: float = 0.7) -> str:
        logger.debug("LLM request: %s", messages[-1]["content"])
        try:
            resp = self.client.chat.completions.create(
                model=model or self.model,
                messages=messages,
                temperature=temperature,
                response_format={"type": "json_object"},
            )
        except OpenAIError as e:
            raise LLMError(str(e) or "OpenAI request failed") from e

        content = resp.choices[0].message.content if resp.choices else None
        if not content:
            raise LLMError("No content returned from OpenAI")
        logger.debug("LLM response: %s", content)
        return content

    # ---------- 스킬 추출 ----------
    def extract_skills(self, job_title: str, job_description: str) -> List[Dict[str, Any]]:
        content = self._complete(build_skill_extraction_messages(job_title, job_description), temperature=0.5)
        try:
            data = parse_json_object(content)
        except ValueError as e:
            raise LLMError("Failed to parse skills") from e

        if isinstance(data, dict) and isinstance(data.get("skills"), list):
            skills = data["skills"]
        elif isinstance(data, list):
            skills = data
        else:
            raise LLMError("Unexpected response format")

        result = []
        for s in skills:
            if isinstance(s, str) and s.strip():
                result.append({"name": s.strip()})
            elif isinstance(s, dict) and isinstance(s.get("name"), str) and s["name"].strip():
                result.append({**s, "name": s["name"].strip()})
        return result

    def extract_skill_names(self, job_description: str) -> List[str]:
        messages = [
            {"role": "system", "content": "You are a technical recruiter who can identify skills from job descriptions."},
            {"role": "user", "content": build_skill_names_prompt(job_description)},
        ]
        content = self._complete(messages, model=self.extraction_model, temperature=0.3)
        try:
            data = parse_json_object(content)
        except ValueError as e:
            raise LLMError("Failed to parse skills") from e

        names = data.get("skills") if isinstance(data, dict) else data
        if not isinstance(names, list):
            raise LLMError("Unexpected response format")
        return [n.strip() for n in names if isinstance(n, str) and n.strip()]

    # ---------- 질문 생성 ----------
    def generate_questions_for_role(
        self, job_role: str, job_description: str, custom_instructions: Optional[str] = None
    ) -> List[Dict[str, Any]]:
        messages = [
            {
                "role": "system",
                "content": "You are an expert interviewer who creates relevant interview questions based on job descriptions. Include detailed suggested answers for each question.",
            },
            {"role": "user", "content": build_role_questions_prompt(job_role, job_description, custom_instructions)},
        ]
        content = self._complete(messages, model=self.extraction_model)
        return self._question_list(content)

    def generate_questions_for_skills(
        self, job_role: str, skills: Sequence[Any], custom_instructions: Optional[str] = None
    ) -> List[Dict[str, Any]]:
        messages = [
            {
                "role": "system",
                "content": f"You are an expert interviewer creating relevant interview questions for a {job_role} position.",
            },
            {"role": "user", "content": build_batch_questions_prompt(job_role, skills, custom_instructions)},
        ]
        content = self._complete(messages)
        return self._question_list(content)

    def generate_question_for_skill(
        self,
        skill,
        existing_questions: Sequence[str] = (),
        feedback: Sequence[str] = (),
        force_coding: bool = False,
    ) -> Dict[str, Any]:
        prompt = build_single_question_prompt(
            skill.name,
            skill.level,
            skill.difficulty or "Medium",
            existing_questions,
            feedback,
            force_coding,
        )
        system = (
            "You are an expert interviewer who creates relevant interview questions for specific technical skills. "
            "Generate exactly 1 unique question that must not exceed 400 characters. Include a detailed suggested answer."
        )
        if feedback:
            system += " CRITICAL: You MUST incorporate the provided feedback into your question generation."
        if force_coding:
            system += " IMPORTANT: This question MUST be a coding question requiring the candidate to write or debug code."

        content = self._complete([
            {"role": "system", "content": system},
            {"role": "user", "content": prompt},
        ])
        try:
            data = parse_json_object(content)
        except ValueError as e:
            raise LLMError("Invalid response format from OpenAI") from e
        if not isinstance(data, dict) or not data.get("question"):
            raise LLMError("Invalid response format from OpenAI")

        parsed = parse_question_completion(content, {"difficulty": skill.difficulty, "questionFormat": skill.question_format})
        return parsed.data

    # ---------- 재생성 ----------
    def regenerate_question(
        self,
        skill,
        original_content: Dict[str, Any],
        reason: Optional[str] = None,
        standing_feedback: Optional[str] = None,
    ) -> ParsedQuestion:
        prompt = build_regeneration_prompt(
            skill.name,
            skill.level,
            skill.difficulty,
            original_content.get("question") or "",
            reason,
            standing_feedback,
        )
        system = (
            "You are an expert interviewer creating high-quality interview questions. "
            "Format your response as a JSON object with fields: question, answer, "
            "category (Technical/Experience/Problem Solving/Soft Skills), difficulty (Easy/Medium/Hard), "
            "questionFormat (Open-ended/Coding/Scenario/Case Study/Design/Live Assessment), and coding "
            "(boolean: true if questionFormat is 'Coding' or question involves writing/debugging code, false otherwise)."
        )
        content = self._complete([
            {"role": "system", "content": system},
            {"role": "user", "content": prompt},
        ])
        parsed = parse_question_completion(content, original_content)
        if parsed.fallback:
            logger.warning("regeneration response was not valid JSON, scraped fields instead")
        return parsed

    def regenerate_with_feedback(
        self,
        skill,
        questions_with_feedback: Sequence[Tuple[str, Optional[str]]],
        global_feedback: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        prompt = build_feedback_regeneration_prompt(
            skill.name,
            skill.level,
            skill.difficulty,
            skill.category,
            questions_with_feedback,
            global_feedback,
        )
        system = (
            "You are an expert interviewer who creates high-quality interview questions.\n"
            "Your task is to generate improved questions based on specific feedback.\n"
            "You must output the content in a valid JSON format.\n"
            "You must generate exactly the requested number of questions."
        )
        content = self._complete([
            {"role": "system", "content": system},
            {"role": "user", "content": prompt},
        ])
        return self._question_list(content)

    def generate_sheet_questions(
        self, skills: Sequence[str], experience_range: str = DEFAULT_EXPERIENCE_RANGE
    ) -> List[Dict[str, Any]]:
        messages = [
            {
                "role": "system",
                "content": (
                    f"You are an expert interview question generator. You must generate exactly {QUESTIONS_PER_SKILL} "
                    "scenario-based questions for each skill provided. Format the ideal answers using proper HTML tags "
                    "as specified. Make sure each question is unique, practical, and suitable for experienced candidates."
                ),
            },
            {"role": "user", "content": build_sheet_questions_prompt(skills, experience_range)},
        ]
        content = self._complete(messages)
        return self._question_list(content)

    @staticmethod
    def _question_list(content: str) -> List[Dict[str, Any]]:
        try:
            data = parse_json_object(content)
        except ValueError as e:
            raise LLMError("Failed to parse questions") from e
        if isinstance(data, dict) and isinstance(data.get("questions"), list):
            return [q for q in data["questions"] if isinstance(q, dict)]
        if isinstance(data, list):
            return [q for q in data if isinstance(q, dict)]
        raise LLMError("Unexpected response format")
