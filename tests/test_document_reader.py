"""Tests for proposal document ingestion."""
from __future__ import annotations

from pathlib import Path

import pytest
from docx import Document
from pypdf import PdfWriter

from parsers.document_reader import load_document_text
from utils.error_handler import InputError


class TestPlainText:
    def test_txt_is_normalized(self, tmp_path: Path):
        path = tmp_path / "proposal.txt"
        path.write_bytes(b"Specific Aims  \r\nline one\r\n\r\n\r\n\r\nline two\r\n\r\n")

        assert load_document_text(path) == "Specific Aims\nline one\n\nline two"

    def test_markdown(self, tmp_path: Path):
        path = tmp_path / "proposal.md"
        path.write_text("# Innovation\n\nNew idea.\n", encoding="utf-8")

        assert load_document_text(str(path)) == "# Innovation\n\nNew idea."


class TestDocx:
    def test_paragraphs_and_tables(self, tmp_path: Path):
        path = tmp_path / "proposal.docx"
        doc = Document()
        doc.add_heading("Specific Aims", level=1)
        doc.add_paragraph("We will use a randomized design.")
        table = doc.add_table(rows=1, cols=2)
        table.rows[0].cells[0].text = "Year 1"
        table.rows[0].cells[1].text = "Recruitment"
        doc.save(str(path))

        text = load_document_text(path)

        assert text.splitlines()[:2] == ["Specific Aims", "We will use a randomized design."]
        assert "Year 1\tRecruitment" in text


class TestHtml:
    def test_scripts_are_dropped(self, tmp_path: Path):
        path = tmp_path / "proposal.html"
        path.write_text(
            "<html><head><style>p {color: red}</style></head>"
            "<body><h1>Specific Aims</h1><p>Aim text here.</p>"
            "<script>var x = 1;</script></body></html>",
            encoding="utf-8",
        )

        text = load_document_text(path)

        assert "Specific Aims" in text
        assert "Aim text here." in text
        assert "var x" not in text
        assert "color" not in text


class TestErrors:
    def test_missing_file(self, tmp_path: Path):
        with pytest.raises(InputError):
            load_document_text(tmp_path / "absent.txt")

    def test_unsupported_format(self, tmp_path: Path):
        path = tmp_path / "proposal.rtf"
        path.write_text("{\\rtf1 hello}", encoding="utf-8")

        with pytest.raises(InputError) as exc:
            load_document_text(path)

        assert "Unsupported document format" in exc.value.get_user_message()

    def test_empty_text_file(self, tmp_path: Path):
        path = tmp_path / "empty.txt"
        path.write_text("  \n\n", encoding="utf-8")

        with pytest.raises(InputError):
            load_document_text(path)

    def test_pdf_without_text(self, tmp_path: Path):
        path = tmp_path / "blank.pdf"
        writer = PdfWriter()
        writer.add_blank_page(width=72, height=72)
        with open(path, "wb") as f:
            writer.write(f)

        with pytest.raises(InputError):
            load_document_text(path)
