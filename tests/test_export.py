"""Tests for template export."""

import json

import pytest

from fillable.model.field import FieldSchema, FieldSchemaError
from fillable.model.template import Template, load_template
from fillable.pdf.export import (
    SourceDocumentNotFoundError,
    export_fillable,
    fillable_filename,
    write_download,
)
from fillable.pdf.importer import import_pdf_widgets


def _template_payload(documents):
    return {
        "name": "Lease",
        "documents": documents,
        "fields": [
            {
                "uuid": "tenant",
                "name": "Tenant",
                "type": "text",
                "areas": [{"page": 0, "x": 0.1, "y": 0.1, "w": 0.4, "h": 0.05}],
            },
            {"uuid": "sig", "type": "signature", "areas": [{"page": 0, "x": 0.1, "y": 0.8, "w": 0.3, "h": 0.1}]},
        ],
    }


class TestExportFillable:
    def test_builds_download(self, tmp_path, two_page_pdf):
        (tmp_path / "lease.pdf").write_bytes(two_page_pdf)
        template_path = tmp_path / "lease.json"
        template_path.write_text(json.dumps(_template_payload(["lease.pdf"])), encoding="utf-8")

        download = export_fillable(load_template(template_path))

        assert download.filename == "Lease-fillable.pdf"
        assert download.content_type == "application/pdf"
        assert [widget.name for widget in import_pdf_widgets(download.content)] == ["Tenant"]

        written = write_download(download, tmp_path)
        assert written == tmp_path / "Lease-fillable.pdf"
        assert written.read_bytes() == download.content

    def test_template_without_documents(self):
        template = Template(name="Empty", fields=[FieldSchema(uuid="a", type="text")])

        with pytest.raises(SourceDocumentNotFoundError):
            export_fillable(template)

    def test_missing_document_file(self, tmp_path):
        template = Template(name="Gone", documents=[tmp_path / "missing.pdf"])

        with pytest.raises(SourceDocumentNotFoundError):
            export_fillable(template)

    def test_custom_lookup(self, two_page_pdf):
        template = Template(name="Remote")

        download = export_fillable(template, lookup=lambda _: two_page_pdf)

        assert download.filename == "Remote-fillable.pdf"
        assert download.content.startswith(b"%PDF-")


class TestLoadTemplate:
    def test_resolves_documents_relative_to_template(self, tmp_path):
        template_path = tmp_path / "t.json"
        template_path.write_text(json.dumps(_template_payload(["docs/a.pdf"])), encoding="utf-8")

        template = load_template(template_path)

        assert template.documents == [tmp_path / "docs" / "a.pdf"]
        assert [field.uuid for field in template.fields] == ["tenant", "sig"]

    def test_invalid_json(self, tmp_path):
        template_path = tmp_path / "t.json"
        template_path.write_text("{not json", encoding="utf-8")

        with pytest.raises(FieldSchemaError):
            load_template(template_path)

    def test_missing_name(self):
        with pytest.raises(FieldSchemaError):
            Template.from_dict({"fields": []})


def test_fillable_filename():
    assert fillable_filename("Contract 2024") == "Contract 2024-fillable.pdf"
