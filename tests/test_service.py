from decimal import Decimal

import pytest

from medpdfmaker import ClaimFormService, MedPdfError, TemplateNotFoundError


class FakeS3:
    def __init__(self):
        self.objects = {}

    def put_object(self, Bucket, Key, Body, ContentType):
        self.objects[(Bucket, Key)] = (Body, ContentType)


def test_generate_batch_per_member(settings, make_records, tmp_path):
    service = ClaimFormService(settings)
    records = make_records(7, member_id="A") + make_records(2, member_id="B") + make_records(1, member_id="A")

    result = service.generate_batch(records, output_dir=tmp_path)

    assert list(result) == ["A", "B"]
    assert [p.name for p in result["A"]] == ["A_001.pdf", "A_002.pdf"]
    assert [p.name for p in result["B"]] == ["B_001.pdf"]


def test_generate_member_uses_configured_output_dir(settings, make_records):
    pages = ClaimFormService(settings).generate_member(make_records(1))
    assert pages[0].parent == settings.output_dir
    assert pages[0].is_file()


def test_generate_from_spreadsheet_uses_flat_charge(settings, tmp_path):
    path = tmp_path / "trips.csv"
    path.write_text(
        "Member ID,F&L Name,Pickup Date,Origin,Ref ID,Trip Price\n"
        "Z1,Ann Lee,01/02/2024,QQ/home,R-1,\n"
        "Z1,Ann Lee,01/03/2024,QQ/home,R-2,20\n"
    )
    service = ClaimFormService(settings)

    result = service.generate_from_spreadsheet(path, output_dir=tmp_path / "out")

    assert [p.name for p in result["Z1"]] == ["Z1_001.pdf"]


def test_pages_uploaded_to_s3(settings, make_records, tmp_path):
    s3 = FakeS3()
    service = ClaimFormService(settings.model_copy(update={"s3_bucket": "claims"}), s3_client=s3)

    pages = service.generate_member(make_records(7), output_dir=tmp_path)

    assert sorted(key for _, key in s3.objects) == ["medpdfmaker/M100_001.pdf", "medpdfmaker/M100_002.pdf"]
    body, content_type = s3.objects[("claims", "medpdfmaker/M100_001.pdf")]
    assert body == pages[0].read_bytes()
    assert content_type == "application/pdf"


def test_template_fields(settings):
    fields = ClaimFormService(settings).template_fields()
    assert "Text1" in fields and "Text57" in fields


def test_missing_template_is_fatal(settings, tmp_path):
    with pytest.raises(TemplateNotFoundError):
        ClaimFormService(settings.model_copy(update={"template_path": tmp_path / "gone.pdf"}))


def test_clashing_file_names_rejected_before_writing(settings, make_records, tmp_path):
    records = make_records(1, member_id="AB/12") + make_records(1, member_id="AB_12")

    with pytest.raises(MedPdfError, match="AB_12"):
        ClaimFormService(settings).generate_batch(records, output_dir=tmp_path / "out")

    assert not (tmp_path / "out").exists()
