# jdqna/services/export_service.py
"""
질문 목록 내보내기

- 기본 포맷: CSV / Excel / PDF (Question, Answer, Category, Difficulty, Skill, Status)
- FloCareer 업로드 시트: 15개 컬럼 (CSV / Excel)
"""
import csv
import io
import re
from typing import Any, Dict, Iterable, List, Optional
from xml.sax.saxutils import escape

from openpyxl import Workbook
from openpyxl.styles import Alignment, Font
from openpyxl.utils import get_column_letter
from reportlab.lib.colors import HexColor
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import inch
from reportlab.platypus import HRFlowable, Paragraph, SimpleDocTemplate, Spacer

EXPORT_HEADERS = ["Question", "Answer", "Category", "Difficulty", "Skill", "Status"]
EXPORT_COLUMN_WIDTHS = [60, 80, 18, 12, 24, 10]
SHEET_TITLE = "Interview Questions"

FLOCAREER_HEADERS = [
    "Sl No",
    "Corp ID",
    "Url ID",
    "Round Sequence",
    "Question Title",
    "Question Description",
    "Candidate Description",
    "Candidate facing doc url",
    "Tags",
    "Ideal Answer",
    "Coding",
    "Mandatory",
    "Hide in FloReport",
    "Skill",
    "Pool Name",
]
FLOCAREER_COLUMN_WIDTHS = [8, 12, 12, 15, 40, 60, 60, 30, 30, 80, 10, 12, 15, 20, 20]

XLSX_MIME = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def _text(value: Any) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


def truncate(text: str, max_length: Optional[int]) -> str:
    if max_length is None or max_length < 0 or len(text) <= max_length:
        return text
    return text[:max_length] + "..."


def _skill_name(q: Dict[str, Any]) -> str:
    skill = q.get("skill")
    if isinstance(skill, dict):
        skill = skill.get("name")
    return _text(skill or q.get("skillName")).strip()


# ------------------------
# 기본 포맷
# ------------------------
def format_question_for_export(q: Optional[Dict[str, Any]], max_length: Optional[int] = None) -> Dict[str, str]:
    """
    None/부분 입력에도 예외 없이 6개 필드를 채운다.
    category/difficulty/skill 이 없으면 "Unknown", status 가 없으면 "None".
    """
    q = q if isinstance(q, dict) else {}
    status = q.get("status") or q.get("liked")
    return {
        "question": truncate(_text(q.get("question")), max_length),
        "answer": truncate(_text(q.get("answer")), max_length),
        "category": _text(q.get("category")).strip() or "Unknown",
        "difficulty": _text(q.get("difficulty")).strip() or "Unknown",
        "skill": _skill_name(q) or "Unknown",
        "status": _text(status).strip() or "None",
    }


def _rows(questions: Iterable[Any], max_length: Optional[int]) -> List[List[str]]:
    rows = []
    for q in questions or []:
        f = format_question_for_export(q, max_length)
        rows.append([f["question"], f["answer"], f["category"], f["difficulty"], f["skill"], f["status"]])
    return rows


def export_to_csv(questions: Iterable[Any], max_length: Optional[int] = None) -> str:
    buf = io.StringIO()
    writer = csv.writer(buf, quoting=csv.QUOTE_MINIMAL, lineterminator="\r\n")
    writer.writerow(EXPORT_HEADERS)
    writer.writerows(_rows(questions, max_length))
    return buf.getvalue()


def _write_sheet(headers: List[str], rows: List[List[str]], widths: List[int]) -> bytes:
    wb = Workbook()
    ws = wb.active
    ws.title = SHEET_TITLE

    ws.append(headers)
    for cell in ws[1]:
        cell.font = Font(bold=True)
    for row in rows:
        ws.append(row)

    for idx, width in enumerate(widths, start=1):
        ws.column_dimensions[get_column_letter(idx)].width = width
    for row in ws.iter_rows(min_row=2):
        for cell in row:
            cell.alignment = Alignment(wrap_text=True, vertical="top")

    out = io.BytesIO()
    wb.save(out)
    return out.getvalue()


def export_to_excel(questions: Iterable[Any], max_length: Optional[int] = None) -> bytes:
    return _write_sheet(EXPORT_HEADERS, _rows(questions, max_length), EXPORT_COLUMN_WIDTHS)


def export_to_pdf(
    questions: Iterable[Any],
    title: str = "Interview Questions",
    max_length: Optional[int] = None,
) -> bytes:
    """질문/답변을 한 장짜리 리포트 형태로 렌더링"""
    buf = io.BytesIO()
    doc = SimpleDocTemplate(
        buf,
        pagesize=A4,
        rightMargin=0.75 * inch,
        leftMargin=0.75 * inch,
        topMargin=0.75 * inch,
        bottomMargin=0.75 * inch,
        title=title,
    )

    styles = getSampleStyleSheet()
    title_style = ParagraphStyle("ExportTitle", parent=styles["Title"], fontSize=18, spaceAfter=12)
    question_style = ParagraphStyle(
        "ExportQuestion", parent=styles["Normal"], fontSize=11, fontName="Helvetica-Bold", spaceAfter=4
    )
    meta_style = ParagraphStyle("ExportMeta", parent=styles["Normal"], fontSize=8, textColor=HexColor("#666666"))
    body_style = ParagraphStyle("ExportBody", parent=styles["Normal"], fontSize=10, leading=13, spaceAfter=6)

    elements = [Paragraph(escape(title), title_style)]
    formatted = [format_question_for_export(q, max_length) for q in questions or []]
    if not formatted:
        elements.append(Paragraph("No questions to export.", body_style))

    for i, f in enumerate(formatted, start=1):
        elements.append(Paragraph(f"{i}. {escape(f['question'])}", question_style))
        meta = f"{f['skill']} | {f['category']} | {f['difficulty']} | {f['status']}"
        elements.append(Paragraph(escape(meta), meta_style))
        elements.append(Spacer(1, 4))
        answer = escape(f["answer"]).replace("\n", "<br/>")
        elements.append(Paragraph(f"<b>Answer:</b> {answer}", body_style))
        elements.append(HRFlowable(width="100%", thickness=0.5, color=HexColor("#DDDDDD")))
        elements.append(Spacer(1, 8))

    doc.build(elements)
    return buf.getvalue()


# ------------------------
# FloCareer 시트
# ------------------------
def format_ideal_answer(answer: Any) -> str:
    """줄바꿈/불릿/코드블록을 CKEditor 용 HTML 로 변환"""
    if not answer:
        return ""
    formatted = _text(answer).strip()
    lines = re.split(r"\r?\n", formatted)

    processed = []
    in_list = False
    for raw in lines:
        line = raw.strip()
        bullet = re.match(r"^[-*]\s+", line)
        if bullet:
            if not in_list:
                processed.append("<ul>")
                in_list = True
            processed.append(f"<li>{line[bullet.end():].strip()}</li>")
            continue
        if in_list:
            processed.append("</ul>")
            in_list = False
        if line:
            processed.append(line)
    if in_list:
        processed.append("</ul>")

    formatted = "<br>".join(processed)
    formatted = formatted.replace("<br><ul>", "<ul>").replace("</ul><br>", "</ul>")
    formatted = re.sub(r"```([^`]+)```", lambda m: f"<pre><code>{m.group(1)}</code></pre>", formatted)
    formatted = re.sub(r"`([^`]+)`", r"<code>\1</code>", formatted)
    # 제어 문자 제거
    return re.sub(r"[\x00-\x1f\x7f-\x9f]", "", formatted)


def extract_question_title(question: Any) -> str:
    """첫 문장 (없으면 앞 100자)"""
    text = _text(question).strip()
    if not text:
        return ""
    match = re.match(r"^[^.!?]*[.!?]", text)
    if match:
        return match.group(0).strip()
    return text[:100] + "..." if len(text) > 100 else text


def format_coding_field(coding: Any) -> str:
    if isinstance(coding, bool):
        return "Yes" if coding else "No"
    if isinstance(coding, str) and coding.strip().lower() in ("true", "yes", "1"):
        return "Yes"
    return "No"


def _tags(q: Dict[str, Any]) -> str:
    if q.get("tags"):
        return _text(q["tags"]).strip()
    parts = [_text(q.get("category")).strip(), _text(q.get("questionFormat")).strip()]
    return ", ".join(p for p in parts if p)


def build_flocareer_rows(questions: Iterable[Any]) -> List[Dict[str, str]]:
    rows = []
    for index, q in enumerate(questions or [], start=1):
        q = q if isinstance(q, dict) else {}
        description = _text(q.get("question") or q.get("questionDescription")).strip()
        coding = q.get("coding") if q.get("coding") is not None else q.get("isCoding", False)
        rows.append({
            "Sl No": str(index),
            "Corp ID": _text(q.get("corpId")).strip(),
            "Url ID": _text(q.get("urlId")).strip(),
            "Round Sequence": str(q.get("roundSequence") or 1),
            "Question Title": extract_question_title(description),
            "Question Description": description,
            "Candidate Description": _text(q.get("candidateDescription") or description).strip(),
            "Candidate facing doc url": _text(q.get("candidateFacingDocUrl")).strip(),
            "Tags": _tags(q),
            "Ideal Answer": format_ideal_answer(q.get("answer") or q.get("idealAnswer")),
            "Coding": format_coding_field(coding),
            "Mandatory": _text(q.get("mandatory") or "No").strip(),
            "Hide in FloReport": _text(q.get("hideInFloReport") or "No").strip(),
            "Skill": _skill_name(q),
            "Pool Name": _text(q.get("poolName")).strip(),
        })
    return rows


def export_flocareer_csv(questions: Iterable[Any]) -> str:
    buf = io.StringIO()
    writer = csv.DictWriter(buf, fieldnames=FLOCAREER_HEADERS, lineterminator="\r\n")
    writer.writeheader()
    writer.writerows(build_flocareer_rows(questions))
    return buf.getvalue()


def export_flocareer_excel(questions: Iterable[Any]) -> bytes:
    rows = [[row[h] for h in FLOCAREER_HEADERS] for row in build_flocareer_rows(questions)]
    return _write_sheet(FLOCAREER_HEADERS, rows, FLOCAREER_COLUMN_WIDTHS)


# 포맷 -> (확장자, MIME)
EXPORT_FORMATS = {
    "csv": ("csv", "text/csv"),
    "excel": ("xlsx", XLSX_MIME),
    "pdf": ("pdf", "application/pdf"),
    "flocareer-csv": ("csv", "text/csv"),
    "flocareer-excel": ("xlsx", XLSX_MIME),
}


def render_export(fmt: str, questions: List[Any], max_length: Optional[int] = None, title: Optional[str] = None):
    """(본문, 확장자, MIME) 반환. 알 수 없는 포맷이면 ValueError"""
    if fmt not in EXPORT_FORMATS:
        raise ValueError(f"Format must be one of: {', '.join(EXPORT_FORMATS)}")
    ext, mime = EXPORT_FORMATS[fmt]

    if fmt == "csv":
        body = export_to_csv(questions, max_length)
    elif fmt == "excel":
        body = export_to_excel(questions, max_length)
    elif fmt == "pdf":
        body = export_to_pdf(questions, title or "Interview Questions", max_length)
    elif fmt == "flocareer-csv":
        body = export_flocareer_csv(questions)
    else:
        body = export_flocareer_excel(questions)
    return body, ext, mime
