"""
Tests for question export (CSV / Excel / PDF / FloCareer sheet).
"""

import csv
import io

from fastapi.testclient import TestClient
from openpyxl import load_workbook

from jdqna.services.export_service import (
    build_flocareer_rows,
    export_flocareer_csv,
    export_to_csv,
    export_to_excel,
    export_to_pdf,
    extract_question_title,
    format_coding_field,
    format_ideal_answer,
    format_question_for_export,
)

HEADER = "Question,Answer,Category,Difficulty,Skill,Status"


def _question(**extra):
    q = {
        "question": "Explain Python decorators.",
        "answer": "Functions that wrap other functions.",
        "category": "Technical",
        "difficulty": "Medium",
        "skillName": "Python",
        "liked": "LIKED",
    }
    q.update(extra)
    return q


class TestFormatQuestionForExport:
    def test_none_input_does_not_raise(self):
        assert format_question_for_export(None) == {
            "question": "",
            "answer": "",
            "category": "Unknown",
            "difficulty": "Unknown",
            "skill": "Unknown",
            "status": "None",
        }

    def test_partial_input_uses_defaults(self):
        f = format_question_for_export({"question": "Why?", "category": None})
        assert f["question"] == "Why?"
        assert f["category"] == "Unknown"
        assert f["status"] == "None"

    def test_skill_object_is_flattened(self):
        f = format_question_for_export({"skill": {"name": "SQL"}})
        assert f["skill"] == "SQL"

    def test_idempotent_on_well_formed_input(self):
        once = format_question_for_export(_question())
        assert format_question_for_export(once) == once

    def test_truncation_bound(self):
        f = format_question_for_export(_question(question="x" * 500, answer="y" * 500), max_length=100)
        assert len(f["question"]) <= 103
        assert f["question"].endswith("...")
        assert len(f["answer"]) == 103

    def test_short_text_is_not_truncated(self):
        f = format_question_for_export(_question(question="short"), max_length=100)
        assert f["question"] == "short"


class TestCsv:
    def test_empty_list_is_header_only(self):
        assert export_to_csv([]) == HEADER + "\r\n"

    def test_header_and_row(self):
        out = export_to_csv([_question()])
        lines = out.splitlines()
        assert lines[0] == HEADER
        assert lines[1] == "Explain Python decorators.,Functions that wrap other functions.,Technical,Medium,Python,LIKED"

    def test_quotes_and_commas_are_escaped(self):
        out = export_to_csv([_question(question='Question with "quotes" and, commas')])
        assert '"Question with ""quotes"" and, commas"' in out

    def test_newlines_are_quoted(self):
        out = export_to_csv([_question(answer="line one\nline two")])
        rows = list(csv.reader(io.StringIO(out)))
        assert rows[1][1] == "line one\nline two"
        assert '"line one\nline two"' in out

    def test_carriage_return_is_quoted(self):
        out = export_to_csv([_question(question="a\rb")])
        assert '"a\rb"' in out
        rows = list(csv.reader(io.StringIO(out, newline="")))
        assert rows[1][0] == "a\rb"
        assert len(rows) == 2

    def test_records_end_with_crlf(self):
        out = export_to_csv([_question()])
        assert out.count("\r\n") == 2

    def test_malformed_entries_do_not_raise(self):
        out = export_to_csv([None, {}, {"question": None}])
        assert len(out.splitlines()) == 4


def test_excel_has_one_row_per_question():
    data = export_to_excel([_question(), _question(question="Second?")])
    wb = load_workbook(io.BytesIO(data))
    ws = wb["Interview Questions"]
    assert [c.value for c in ws[1]] == HEADER.split(",")
    assert ws.max_row == 3
    assert ws["A3"].value == "Second?"
    assert ws.column_dimensions["B"].width == 80


def test_pdf_is_rendered():
    data = export_to_pdf([_question(question="Use <b> & escape?")], title="Backend")
    assert data.startswith(b"%PDF")


class TestFloCareerSheet:
    def test_question_title_is_first_sentence(self):
        assert extract_question_title("What is REST? Explain briefly.") == "What is REST?"
        assert extract_question_title("a" * 120) == "a" * 100 + "..."

    def test_ideal_answer_html(self):
        html = format_ideal_answer("Intro\n- one\n- two\nUse `map`")
        assert "<ul>" in html and "<li>one</li>" in html
        assert "<code>map</code>" in html
        assert "\n" not in html

    def test_coding_field(self):
        assert format_coding_field(True) == "Yes"
        assert format_coding_field("yes") == "Yes"
        assert format_coding_field(None) == "No"

    def test_rows(self):
        rows = build_flocareer_rows([_question(questionFormat="Scenario", coding=True)])
        row = rows[0]
        assert row["Sl No"] == "1"
        assert row["Round Sequence"] == "1"
        assert row["Question Title"] == "Explain Python decorators."
        assert row["Tags"] == "Technical, Scenario"
        assert row["Coding"] == "Yes"
        assert row["Mandatory"] == "No"
        assert row["Skill"] == "Python"

    def test_csv_header(self):
        first_line = export_flocareer_csv([]).splitlines()[0]
        assert first_line.startswith("Sl No,Corp ID,Url ID,Round Sequence,Question Title")
        assert first_line.endswith("Skill,Pool Name")


class TestExportEndpoint:
    def test_csv_attachment(self, client: TestClient, auth_headers: dict):
        response = client.post(
            "/api/export-questions",
            json={"questions": [_question()], "format": "csv", "filename": "qs.csv"},
            headers=auth_headers,
        )
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/csv")
        assert response.headers["content-disposition"] == 'attachment; filename="qs.csv"'
        assert response.text.startswith(HEADER)

    def test_max_length_applies(self, client: TestClient, auth_headers: dict):
        response = client.post(
            "/api/export-questions",
            json={"questions": [_question(question="z" * 300)], "format": "csv", "maxLength": 50},
            headers=auth_headers,
        )
        row = list(csv.reader(io.StringIO(response.text)))[1]
        assert row[0] == "z" * 50 + "..."

    def test_questions_must_be_list(self, client: TestClient, auth_headers: dict):
        response = client.post("/api/export-questions", json={"questions": "nope", "format": "csv"}, headers=auth_headers)
        assert response.status_code == 400
        assert response.json() == {"success": False, "error": "Questions array is required"}

    def test_unknown_format(self, client: TestClient, auth_headers: dict):
        response = client.post("/api/export-questions", json={"questions": [], "format": "docx"}, headers=auth_headers)
        assert response.status_code == 400

    def test_excel_download(self, client: TestClient, auth_headers: dict):
        response = client.post(
            "/api/export-questions",
            json={"questions": [_question()], "format": "flocareer-excel"},
            headers=auth_headers,
        )
        assert response.status_code == 200
        assert response.headers["content-disposition"].endswith('.xlsx"')
        wb = load_workbook(io.BytesIO(response.content))
        assert wb.active["A1"].value == "Sl No"
