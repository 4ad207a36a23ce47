"""Tests for the two-stage resident validator."""

from datetime import date, timedelta

import pytest

from sipm.models.resident import ResidentStatus
from sipm.validation import ResidentValidator, ValidationError

from tests.conftest import make_input


class FakeNikIndex:
    def __init__(self, taken):
        self.taken = taken  # nik -> id

    def nik_exists(self, nik, exclude_id=None):
        return nik in self.taken and self.taken[nik] != exclude_id


class TestSchemaStage:
    """Stage 1: lengths, required fields, death certificate."""

    def test_valid_candidate(self):
        result = ResidentValidator().validate(make_input())
        assert result.is_valid
        assert result.issues == []

    @pytest.mark.parametrize("nik", ["", "123", "32010203040506071"])
    def test_nik_must_be_16_characters(self, nik):
        result = ResidentValidator().validate(make_input(nik=nik))
        assert not result.schema_valid
        assert result.first_error.message == "NIK harus 16 digit."

    @pytest.mark.parametrize("field", ["name", "address", "rt", "dusun"])
    def test_required_fields(self, field):
        result = ResidentValidator().validate(make_input(**{field: "   "}))
        assert not result.is_valid
        assert [i.field for i in result.issues] == [field]

    def test_deceased_requires_certificate(self):
        result = ResidentValidator().validate(make_input(status=ResidentStatus.DECEASED))
        assert not result.is_valid
        assert result.first_error.field == "death_certificate_img"
        assert "surat kematian" in result.first_error.message

    def test_semantic_stage_skipped_on_schema_failure(self):
        index = FakeNikIndex({"1234": "other"})
        result = ResidentValidator(index).validate(make_input(nik="1234"))
        assert result.semantic_valid is False
        assert all(i.issue_type != "duplicate" for i in result.issues)


class TestSemanticStage:
    """Stage 2: plausibility and uniqueness."""

    def test_non_digit_nik_is_a_warning(self):
        result = ResidentValidator().validate(make_input(nik="32010203040506AB"))
        assert result.is_valid
        assert len(result.warnings) == 1

    def test_future_dob_is_a_warning(self):
        result = ResidentValidator().validate(
            make_input(dob=date.today() + timedelta(days=3))
        )
        assert result.is_valid
        assert result.issues[0].issue_type == "future_date"

    def test_duplicate_nik(self):
        index = FakeNikIndex({"3201020304050607": "other"})
        result = ResidentValidator(index).validate(make_input())
        assert not result.is_valid
        assert result.first_error.issue_type == "duplicate"

    def test_own_nik_is_not_duplicate(self):
        index = FakeNikIndex({"3201020304050607": "me"})
        result = ResidentValidator(index).validate(make_input(), exclude_id="me")
        assert result.is_valid

    def test_duplicate_check_can_be_disabled(self):
        index = FakeNikIndex({"3201020304050607": "other"})
        result = ResidentValidator(index).validate(make_input(), check_duplicates=False)
        assert result.is_valid


class TestEnsureValid:
    """Tests for ensure_valid and the operator summary."""

    def test_ensure_valid_raises_with_first_message(self):
        with pytest.raises(ValidationError, match="NIK harus 16 digit.") as exc_info:
            ResidentValidator().ensure_valid(make_input(nik="1", name=""))
        assert len(exc_info.value.issues) == 2

    def test_ensure_valid_returns_result(self):
        result = ResidentValidator().ensure_valid(make_input())
        assert result.is_valid

    def test_summary_ok(self):
        validator = ResidentValidator()
        summary = validator.get_user_friendly_summary(validator.validate(make_input()))
        assert "siap disimpan" in summary

    def test_summary_lists_errors(self):
        validator = ResidentValidator()
        summary = validator.get_user_friendly_summary(
            validator.validate(make_input(rt=""))
        )
        assert "RT wajib diisi." in summary
