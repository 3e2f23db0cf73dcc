"""
Tests for JD file text extraction and Supabase uploads.
"""

import io
import re

import pytest
from docx import Document
from fastapi.testclient import TestClient

from jdqna.services.errors import ExtractionError
from jdqna.services.file_extraction import UnsupportedFileType, extract_text, file_type_of
from jdqna.services.storage_service import build_object_key


def _docx_bytes(*paragraphs):
    doc = Document()
    for p in paragraphs:
        doc.add_paragraph(p)
    buf = io.BytesIO()
    doc.save(buf)
    return buf.getvalue()


@pytest.mark.parametrize(
    "filename,expected",
    [("jd.PDF", "pdf"), ("a.b.docx", "docx"), ("notes.txt", "txt"), ("README", ""), ("", "")],
)
def test_file_type_of(filename, expected):
    assert file_type_of(filename) == expected


def test_extract_text_dispatch():
    assert extract_text("jd.txt", "  Hello JD \n".encode("utf-8")) == "Hello JD"
    assert extract_text("jd.docx", _docx_bytes("Line one", "Line two")) == "Line one\nLine two"


def test_extract_text_errors():
    with pytest.raises(UnsupportedFileType):
        extract_text("image.png", b"\x89PNG")
    with pytest.raises(ExtractionError):
        extract_text("empty.txt", b"   ")
    with pytest.raises(ExtractionError):
        extract_text("broken.pdf", b"not a pdf at all")


class TestExtractTextEndpoint:
    def test_docx(self, client: TestClient, auth_headers):
        response = client.post(
            "/api/extract-text",
            files={"file": ("jd.docx", _docx_bytes("Rust engineer"), "application/octet-stream")},
            headers=auth_headers,
        )
        assert response.status_code == 200
        assert response.json() == {"success": True, "content": "Rust engineer"}

    def test_unsupported_type_is_400(self, client: TestClient, auth_headers):
        response = client.post(
            "/api/extract-text", files={"file": ("jd.rtf", b"{\\rtf1}", "application/rtf")}, headers=auth_headers
        )
        assert response.status_code == 400
        assert response.json()["error"].startswith("Unsupported file type: rtf")

    def test_empty_file_is_422(self, client: TestClient, auth_headers):
        response = client.post("/api/extract-text", files={"file": ("jd.txt", b"", "text/plain")}, headers=auth_headers)
        assert response.status_code == 422
        assert response.json()["success"] is False

    def test_missing_file_is_400(self, client: TestClient, auth_headers):
        response = client.post("/api/extract-text", data={"other": "x"}, headers=auth_headers)
        assert response.status_code == 400


def test_build_object_key():
    key = build_object_key("Report.PDF", folder="misc")
    assert re.fullmatch(r"misc/[0-9a-f]{32}\.pdf", key)
    assert re.fullmatch(r"docs/[0-9a-f]{32}", build_object_key("noext", folder="/docs/"))
    assert build_object_key("a.txt", folder="misc") != build_object_key("a.txt", folder="misc")


def test_upload_returns_public_url(client: TestClient, auth_headers, supabase_client):
    response = client.post(
        "/api/upload", files={"file": ("cv.pdf", b"%PDF-1.4 fake", "application/pdf")}, headers=auth_headers
    )
    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert re.fullmatch(r"https://storage\.test/uploads/misc/[0-9a-f]{32}\.pdf", body["file"]["url"])

    (stored_key, stored_data), = supabase_client.objects.items()
    assert body["file"]["url"].endswith(stored_key)
    assert stored_data == b"%PDF-1.4 fake"


def test_upload_without_file_is_400(client: TestClient, auth_headers):
    response = client.post("/api/upload", data={"other": "x"}, headers=auth_headers)
    assert response.status_code == 400
    assert response.json()["error"] == "No file uploaded"


def test_upload_requires_auth(client: TestClient):
    response = client.post("/api/upload", files={"file": ("a.txt", b"x", "text/plain")})
    assert response.status_code == 401
