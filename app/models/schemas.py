from pydantic import BaseModel, Field
from typing import List, Optional, Dict, Any
from datetime import datetime

from app.models.importer import FormatVerdict, ImportFormat, TestCasePriority


class ImportTextRequest(BaseModel):
    text: str = Field(..., description="Pasted text or the contents of an uploaded file")


class ImportPreviewRequest(ImportTextRequest):
    suite_id: Optional[str] = Field(None, description="Grouping key the imported records will belong to")
    format: Optional[ImportFormat] = Field(
        None, description="Skip detection and parse with this format"
    )


class ImportRecord(BaseModel):
    """A test case ready to be stored by the persistence service."""

    test_case: str = Field(..., description="Display name, '<id>: <title>'")
    description: str = ""
    expected_result: str = ""
    status: str = "Pending"
    priority: TestCasePriority = TestCasePriority.MEDIUM
    category: str = "Functional"
    suite_id: Optional[str] = None
    custom_fields: Dict[str, Any] = Field(default_factory=dict)


class ImportPreview(BaseModel):
    preview_id: str
    verdict: FormatVerdict
    parsed_format: ImportFormat = Field(..., description="Format the records were parsed with")
    suite_id: Optional[str] = None
    records: List[ImportRecord] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)
    created_at: datetime


class ImportResult(BaseModel):
    preview_id: str
    suite_id: Optional[str] = None
    submitted: int = Field(..., description="Number of records handed to the persistence service")
    stored: int = Field(..., description="Number of records the persistence service accepted")
