"""업로드된 JD 파일(PDF, DOCX, TXT)에서 텍스트 추출"""
import io
import logging

import PyPDF2
from docx import Document

from jdqna.services.errors import ExtractionError

logger = logging.getLogger("jdqna.extraction")

SUPPORTED_TYPES = ("pdf", "docx", "txt")


class UnsupportedFileType(ValueError):
    pass


def file_type_of(filename: str) -> str:
    return (filename or "").rsplit(".", 1)[-1].lower() if "." in (filename or "") else ""


def extract_pdf_text(data: bytes) -> str:
    reader = PyPDF2.PdfReader(io.BytesIO(data))
    text = ""
    for page in reader.pages:
        extracted = page.extract_text()
        if extracted:
            text += extracted + "\n"
    return text


def extract_docx_text(data: bytes) -> str:
    doc = Document(io.BytesIO(data))
    return "\n".join(paragraph.text for paragraph in doc.paragraphs)


def extract_text(filename: str, data: bytes) -> str:
    """
    확장자로 분기해서 텍스트 추출.

    Raises:
        UnsupportedFileType: pdf/docx/txt 이외
        ExtractionError: 파싱 실패 또는 추출된 텍스트 없음
    """
    file_type = file_type_of(filename)
    if file_type not in SUPPORTED_TYPES:
        raise UnsupportedFileType(f"Unsupported file type: {file_type or 'unknown'}. Please upload PDF, DOCX, or TXT.")

    try:
        if file_type == "pdf":
            text = extract_pdf_text(data)
        elif file_type == "docx":
            text = extract_docx_text(data)
        else:
            text = data.decode("utf-8", errors="replace")
    except Exception as e:
        logger.exception("failed to read %s", filename)
        raise ExtractionError(f"Failed to extract text from {file_type.upper()} file") from e

    if not text.strip():
        raise ExtractionError(
            "Could not extract text from file. It may be scanned/image-based or empty."
        )
    return text.strip()
