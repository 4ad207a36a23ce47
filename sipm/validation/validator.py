"""
Two-Stage Validation Pipeline

DESIGN DECISION: Validation happens in two distinct stages:

STAGE 1 - SCHEMA VALIDATION:
- NIK length
- Required field presence
- Death certificate present for deceased residents
- This catches incomplete or malformed form input

STAGE 2 - SEMANTIC VALIDATION:
- NIK made of digits only
- Date of birth not in the future
- NIK uniqueness against the registry
- This catches plausible-looking but wrong data

Stage 2 is skipped when stage 1 fails, and the uniqueness check
only runs when a registry is attached.

IMPORTANT: Validation NEVER silently fixes issues.
It reports them so the operator can correct the form.
"""

from datetime import date
from typing import Optional, Protocol

from sipm.models.resident import NIK_LENGTH, ResidentInput, ResidentStatus
from sipm.models.validation import ValidationIssue, ValidationResult


class NikIndex(Protocol):
    """Anything that can answer whether a NIK is already taken."""

    def nik_exists(self, nik: str, exclude_id: Optional[str] = None) -> bool: ...


class ValidationError(Exception):
    """A candidate resident record was rejected before persistence."""

    def __init__(self, result: ValidationResult):
        self.result = result
        first = result.first_error
        super().__init__(first.message if first else "Data penduduk tidak valid.")

    @property
    def issues(self) -> list[ValidationIssue]:
        return self.result.issues


class ResidentValidator:
    """
    Validates candidate resident records through a two-stage pipeline.

    Stage 1: Schema validation (can run without a registry)
    Stage 2: Semantic validation (uses the registry for duplicate checks)
    """

    def __init__(self, registry: Optional[NikIndex] = None):
        """
        Initialize validator.

        Args:
            registry: Used for NIK uniqueness checks.
                      If None, duplicate checking is skipped.
        """
        self._registry = registry

    def _validate_schema(
        self,
        candidate: ResidentInput,
    ) -> tuple[bool, list[ValidationIssue]]:
        """
        Stage 1: Schema validation.

        Returns: (is_valid, list_of_issues)
        """
        issues = []

        if len(candidate.nik) != NIK_LENGTH:
            issues.append(ValidationIssue(
                field="nik",
                issue_type="invalid_length",
                message="NIK harus 16 digit.",
                severity="error",
                suggested_fix=f"Periksa kembali NIK ({len(candidate.nik)} dari {NIK_LENGTH} karakter)",
            ))

        required = {
            "name": "Nama lengkap",
            "address": "Alamat",
            "rt": "RT",
            "dusun": "Dusun",
        }
        for field, label in required.items():
            if not getattr(candidate, field):
                issues.append(ValidationIssue(
                    field=field,
                    issue_type="missing",
                    message=f"{label} wajib diisi.",
                    severity="error",
                ))

        if (
            candidate.status == ResidentStatus.DECEASED
            and not candidate.death_certificate_img
        ):
            issues.append(ValidationIssue(
                field="death_certificate_img",
                issue_type="missing",
                message="Bukti foto surat kematian wajib diunggah untuk status Meninggal.",
                severity="error",
                suggested_fix="Unggah foto surat kematian",
            ))

        is_valid = not any(issue.severity == "error" for issue in issues)

        return is_valid, issues

    def _validate_semantic(
        self,
        candidate: ResidentInput,
        exclude_id: Optional[str],
        check_duplicates: bool,
    ) -> tuple[bool, list[ValidationIssue]]:
        """
        Stage 2: Semantic validation.

        Returns: (is_valid, list_of_issues)
        """
        issues = []

        if not candidate.nik.isdigit():
            issues.append(ValidationIssue(
                field="nik",
                issue_type="invalid_format",
                message="NIK biasanya hanya berisi angka.",
                severity="warning",
                suggested_fix="Pastikan tidak ada huruf atau spasi pada NIK",
            ))

        if candidate.dob > date.today():
            issues.append(ValidationIssue(
                field="dob",
                issue_type="future_date",
                message=f"Tanggal lahir ({candidate.dob.isoformat()}) berada di masa depan.",
                severity="warning",
                suggested_fix="Periksa kembali tanggal lahir",
            ))

        if check_duplicates and self._registry is not None:
            if self._registry.nik_exists(candidate.nik, exclude_id):
                issues.append(ValidationIssue(
                    field="nik",
                    issue_type="duplicate",
                    message="NIK ini sudah digunakan oleh penduduk lain.",
                    severity="error",
                    suggested_fix="Gunakan NIK yang berbeda",
                ))

        is_valid = not any(issue.severity == "error" for issue in issues)

        return is_valid, issues

    def validate(
        self,
        candidate: ResidentInput,
        exclude_id: Optional[str] = None,
        check_duplicates: bool = True,
    ) -> ValidationResult:
        """
        Run full two-stage validation pipeline.

        Args:
            candidate: The record to validate
            exclude_id: Id of the record being edited (its own NIK is not a duplicate)
            check_duplicates: Whether to check NIK uniqueness (requires registry)

        Returns:
            ValidationResult with all issues found
        """
        all_issues = []

        schema_valid, schema_issues = self._validate_schema(candidate)
        all_issues.extend(schema_issues)

        # Only run stage 2 if stage 1 passes
        semantic_valid = False
        if schema_valid:
            semantic_valid, semantic_issues = self._validate_semantic(
                candidate, exclude_id, check_duplicates
            )
            all_issues.extend(semantic_issues)

        warnings = [i.message for i in all_issues if i.severity == "warning"]

        return ValidationResult(
            schema_valid=schema_valid,
            semantic_valid=semantic_valid,
            is_valid=schema_valid and semantic_valid,
            issues=all_issues,
            warnings=warnings,
        )

    def ensure_valid(
        self,
        candidate: ResidentInput,
        exclude_id: Optional[str] = None,
        check_duplicates: bool = True,
    ) -> ValidationResult:
        """Validate and raise ValidationError if any error-level issue was found."""
        result = self.validate(candidate, exclude_id, check_duplicates)
        if result.has_errors:
            raise ValidationError(result)
        return result

    def get_user_friendly_summary(
        self,
        result: ValidationResult,
    ) -> str:
        """
        Generate a summary of validation results for the operator.
        """
        if result.is_valid and not result.warnings:
            return "✅ Data lengkap dan siap disimpan."

        lines = []

        if result.has_errors:
            lines.append("❌ Data belum bisa disimpan:")
            for issue in result.issues:
                if issue.severity == "error":
                    lines.append(f"   • {issue.message}")
                    if issue.suggested_fix:
                        lines.append(f"     💡 {issue.suggested_fix}")

        if result.warnings:
            lines.append("")
            lines.append("⚠️ Mohon periksa kembali:")
            for warning in result.warnings:
                lines.append(f"   • {warning}")

        return "\n".join(lines).strip()
