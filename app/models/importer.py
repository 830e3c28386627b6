from pydantic import BaseModel, Field
from typing import List, Dict, Tuple
from enum import Enum


# Trimmed, non-empty lines of an input text
RawDocument = Tuple[str, ...]

NOT_PRIORITIZED = "Not Prioritized"
HIGH_AUTOMATION_STRENGTH = "High"


class ImportFormat(str, Enum):
    HIERARCHICAL = "hierarchical"
    FLAT = "flat"
    TABULAR = "tabular"
    FREEFORM = "freeform"
    UNKNOWN = "unknown"


class TestCasePriority(str, Enum):
    __test__ = False

    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"


class FormatVerdict(BaseModel):
    format: ImportFormat = Field(..., description="Best matching structural convention")
    confidence: float = Field(..., ge=0.0, le=1.0, description="Score of the best matching convention")
    scores: Dict[ImportFormat, float] = Field(
        default_factory=dict, description="Independent score of every convention"
    )


class TestCaseDraft(BaseModel):
    __test__ = False

    id: str = Field(..., description="Document-local test case identifier, e.g. TC001")
    title: str = ""
    section: str = Field("", description="Heading of the owning section")
    subsection: str = Field("", description="Heading of the owning subsection")
    description: str = ""
    expected_result: str = ""
    priority: TestCasePriority = TestCasePriority.MEDIUM
    automation_status: str = NOT_PRIORITIZED

    def append_description(self, text: str) -> None:
        self.description = f"{self.description} {text}" if self.description else text


class Subsection(BaseModel):
    heading: str
    title: str
    test_cases: List[TestCaseDraft] = Field(default_factory=list)


class Section(BaseModel):
    heading: str
    title: str
    subsections: Dict[str, Subsection] = Field(default_factory=dict)


class ImportMetadata(BaseModel):
    priorities: Dict[str, TestCasePriority] = Field(
        default_factory=dict, description="Test case id to execution priority"
    )
    automation_recommendations: Dict[str, str] = Field(
        default_factory=dict, description="Recommendation text to automation strength"
    )


class ParsedDocument(BaseModel):
    """Result of a hierarchical parse.

    ``test_cases`` is the flat list in document order; ``sections`` is the
    same set of cases grouped for tree-style review.
    """

    test_cases: List[TestCaseDraft] = Field(default_factory=list)
    sections: Dict[str, Section] = Field(default_factory=dict)
    metadata: ImportMetadata = Field(default_factory=ImportMetadata)

    def find_subsection(self, section: str, subsection: str):
        if not section or not subsection:
            return None
        owner = self.sections.get(section)
        if owner is None:
            return None
        return owner.subsections.get(subsection)
