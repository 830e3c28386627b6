from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional
import uuid

import structlog

from app.config.settings import settings
from app.core.cache import IMPORT_PREVIEW_CACHE, TTLCache
from app.models.importer import FormatVerdict, ImportFormat, ParsedDocument, TestCaseDraft
from app.models.schemas import ImportPreview, ImportRecord, ImportResult
from app.repositories.interfaces.test_case_sink import ITestCaseSink
from app.services import fallback_parsers
from app.services.format_classifier import classify
from app.services.hierarchical_parser import parse_hierarchical

logger = structlog.get_logger()

NO_TEST_CASES_WARNING = "Could not detect structured test cases in the provided text"

FALLBACK_PARSERS: Dict[ImportFormat, Callable[[str], List[TestCaseDraft]]] = {
    ImportFormat.TABULAR: fallback_parsers.parse_tabular,
    ImportFormat.FLAT: fallback_parsers.parse_flat,
    ImportFormat.FREEFORM: fallback_parsers.parse_freeform,
    ImportFormat.UNKNOWN: fallback_parsers.parse_freeform,
}


class ImportServiceError(Exception):
    """Base error of the import workflow."""


class PreviewNotFoundError(ImportServiceError):
    """The preview expired or never existed."""


class PersistenceUnavailableError(ImportServiceError):
    """The persistence service did not accept the records."""


class ImportService:
    """Turns pasted text into import previews and hands confirmed ones to storage"""

    def __init__(
        self,
        sink: ITestCaseSink,
        preview_cache: TTLCache = IMPORT_PREVIEW_CACHE,
        min_hierarchical_confidence: Optional[float] = None,
    ):
        self.sink = sink
        self.preview_cache = preview_cache
        self.min_hierarchical_confidence = (
            settings.hierarchical_min_confidence
            if min_hierarchical_confidence is None
            else min_hierarchical_confidence
        )

    def classify(self, text: str) -> FormatVerdict:
        verdict = classify(text)
        logger.info(
            "Format detected",
            format=verdict.format.value,
            confidence=verdict.confidence,
            characters=len(text),
        )
        return verdict

    def parse_hierarchical(self, text: str) -> ParsedDocument:
        document = parse_hierarchical(text)
        logger.info(
            "Hierarchical text parsed",
            test_cases=len(document.test_cases),
            sections=len(document.sections),
            prioritized=len(document.metadata.priorities),
            automation_recommendations=len(document.metadata.automation_recommendations),
        )
        return document

    def choose_format(self, verdict: FormatVerdict) -> ImportFormat:
        """Format to parse with; weak hierarchical matches fall back to freeform."""
        if verdict.format is ImportFormat.HIERARCHICAL:
            if verdict.confidence >= self.min_hierarchical_confidence:
                return ImportFormat.HIERARCHICAL
            return ImportFormat.FREEFORM
        return verdict.format

    def parse_drafts(self, text: str, fmt: ImportFormat) -> List[TestCaseDraft]:
        if fmt is ImportFormat.HIERARCHICAL:
            return self.parse_hierarchical(text).test_cases
        return FALLBACK_PARSERS[fmt](text)

    def to_records(self, drafts: List[TestCaseDraft], suite_id: Optional[str] = None) -> List[ImportRecord]:
        """Convert drafts into records the persistence service understands."""
        records = []
        for draft in drafts:
            records.append(
                ImportRecord(
                    test_case=f"{draft.id}: {draft.title}" if draft.title else draft.id,
                    description=draft.description,
                    expected_result=draft.expected_result,
                    status=settings.default_test_case_status,
                    priority=draft.priority,
                    category=settings.default_test_case_category,
                    suite_id=suite_id,
                    custom_fields={
                        "section": draft.section,
                        "subsection": draft.subsection,
                        "automation_status": draft.automation_status,
                    },
                )
            )
        return records

    def validate(self, drafts: List[TestCaseDraft]) -> List[str]:
        """Warnings shown next to the preview; none of them block the import."""
        if not drafts:
            return [NO_TEST_CASES_WARNING]

        warnings = []
        for draft in drafts:
            if not draft.title.strip():
                warnings.append(f"{draft.id}: test case title is empty")
            if len(draft.description) > settings.max_description_length:
                warnings.append(
                    f"{draft.id}: description is longer than {settings.max_description_length} characters"
                )
            if not draft.expected_result.strip():
                warnings.append(f"{draft.id}: no expected result found")
        return warnings

    def build_preview(
        self,
        text: str,
        suite_id: Optional[str] = None,
        format_hint: Optional[ImportFormat] = None,
    ) -> ImportPreview:
        """Classify and parse the text, then keep the result for confirmation."""
        verdict = self.classify(text)
        fmt = format_hint or self.choose_format(verdict)
        drafts = self.parse_drafts(text, fmt)

        preview = ImportPreview(
            preview_id=uuid.uuid4().hex,
            verdict=verdict,
            parsed_format=fmt,
            suite_id=suite_id,
            records=self.to_records(drafts, suite_id),
            warnings=self.validate(drafts),
            created_at=datetime.now(timezone.utc),
        )
        self.preview_cache.set(preview.preview_id, preview)

        logger.info(
            "Import preview created",
            preview_id=preview.preview_id,
            parsed_format=fmt.value,
            records=len(preview.records),
            warnings=len(preview.warnings),
        )
        return preview

    def get_preview(self, preview_id: str) -> ImportPreview:
        preview = self.preview_cache.get(preview_id)
        if preview is None:
            raise PreviewNotFoundError(f"Import preview {preview_id} not found or expired")
        return preview

    async def confirm_preview(self, preview_id: str) -> ImportResult:
        """Hand a previewed import to the persistence service."""
        preview = self.preview_cache.pop(preview_id)
        if preview is None:
            raise PreviewNotFoundError(f"Import preview {preview_id} not found or expired")

        if not self.sink.is_configured():
            self.preview_cache.set(preview_id, preview)
            raise PersistenceUnavailableError("Persistence service is not configured")

        stored = await self.sink.store_test_cases(preview.records, preview.suite_id)
        if stored is None:
            # Keep the preview so the user can retry
            self.preview_cache.set(preview_id, preview)
            raise PersistenceUnavailableError("Persistence service did not accept the import")

        logger.info(
            "Import confirmed",
            preview_id=preview_id,
            suite_id=preview.suite_id,
            submitted=len(preview.records),
            stored=stored,
        )
        return ImportResult(
            preview_id=preview_id,
            suite_id=preview.suite_id,
            submitted=len(preview.records),
            stored=stored,
        )
