"""Single-pass parser for hierarchical test case text.

The scan keeps an explicit ``ScanState``. Every line is first tagged with a
``LineKind`` by ``classify_line`` and then handed to the transition function
registered for that kind. Priority and automation blocks are read in the
same pass; their contents are merged onto the test cases once the scan is
over.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, Optional

from app.models.importer import (
    ParsedDocument,
    Section,
    Subsection,
    TestCaseDraft,
    TestCasePriority,
)
from app.services import line_patterns as patterns
from app.services.document_assembler import assemble
from app.services.metadata_extractor import (
    is_priority_tier_header,
    parse_priority_tier,
    record_automation_recommendation,
    record_priority_references,
)
from app.services.text_normalizer import normalize_lines


class ScanMode(str, Enum):
    BODY = "body"
    PRIORITY_BLOCK = "priority_block"
    AUTOMATION_BLOCK = "automation_block"


class LineKind(str, Enum):
    SECTION_HEADER = "section_header"
    SUBSECTION_HEADER = "subsection_header"
    TEST_CASE_ID = "test_case_id"
    EXPECTED_RESULT = "expected_result"
    PRIORITY_MARKER = "priority_marker"
    AUTOMATION_MARKER = "automation_marker"
    PRIORITY_TIER = "priority_tier"
    PRIORITY_REFERENCE = "priority_reference"
    PRIORITY_OTHER = "priority_other"
    AUTOMATION_HEADING = "automation_heading"
    AUTOMATION_ITEM = "automation_item"
    TEXT = "text"


@dataclass
class ScanState:
    mode: ScanMode = ScanMode.BODY
    section: str = ""
    subsection: str = ""
    draft: Optional[TestCaseDraft] = None
    # Tier whose "- TC..." reference lines are being read
    priority_tier: Optional[TestCasePriority] = None
    collecting_automation: bool = False


def classify_line(line: str, state: ScanState) -> LineKind:
    """Tag a normalized line; the first matching rule wins."""
    if patterns.is_section_header(line):
        return LineKind.SECTION_HEADER
    if patterns.is_subsection_header(line):
        return LineKind.SUBSECTION_HEADER
    if patterns.is_test_case_id_line(line):
        return LineKind.TEST_CASE_ID
    if patterns.is_expected_result_line(line):
        return LineKind.EXPECTED_RESULT
    if line == patterns.PRIORITY_BLOCK_MARKER:
        return LineKind.PRIORITY_MARKER
    if line == patterns.AUTOMATION_BLOCK_MARKER:
        return LineKind.AUTOMATION_MARKER

    if state.mode is ScanMode.PRIORITY_BLOCK:
        if is_priority_tier_header(line):
            return LineKind.PRIORITY_TIER
        if patterns.is_list_item(line) and state.priority_tier is not None:
            return LineKind.PRIORITY_REFERENCE
        return LineKind.PRIORITY_OTHER

    if state.mode is ScanMode.AUTOMATION_BLOCK:
        if line == patterns.HIGH_AUTOMATION_HEADING:
            return LineKind.AUTOMATION_HEADING
        if patterns.is_list_item(line) and state.collecting_automation:
            return LineKind.AUTOMATION_ITEM

    return LineKind.TEXT


def finalize_draft(state: ScanState, document: ParsedDocument) -> None:
    """Emit the open draft, whether or not its expected result was seen."""
    if state.draft is None:
        return
    document.test_cases.append(state.draft)
    state.draft = None


def on_section_header(state: ScanState, line: str, document: ParsedDocument) -> None:
    state.section = line
    state.subsection = ""
    if line not in document.sections:
        document.sections[line] = Section(heading=line, title=patterns.display_title(line))


def on_subsection_header(state: ScanState, line: str, document: ParsedDocument) -> None:
    state.subsection = line
    section = document.sections.get(state.section)
    if section is not None and line not in section.subsections:
        section.subsections[line] = Subsection(heading=line, title=patterns.display_title(line))


def on_test_case_id(state: ScanState, line: str, document: ParsedDocument) -> None:
    finalize_draft(state, document)
    match = patterns.TEST_CASE_ID_LINE.match(line)
    state.draft = TestCaseDraft(
        id=match.group(1),
        title=match.group(2).strip(),
        section=state.section,
        subsection=state.subsection,
    )


def on_expected_result(state: ScanState, line: str, document: ParsedDocument) -> None:
    if state.draft is None:
        return
    state.draft.expected_result = line[len(patterns.EXPECTED_RESULT_LABEL):].strip()
    finalize_draft(state, document)


def on_priority_marker(state: ScanState, line: str, document: ParsedDocument) -> None:
    state.mode = ScanMode.PRIORITY_BLOCK


def on_automation_marker(state: ScanState, line: str, document: ParsedDocument) -> None:
    state.mode = ScanMode.AUTOMATION_BLOCK


def on_priority_tier(state: ScanState, line: str, document: ParsedDocument) -> None:
    state.priority_tier, _ = parse_priority_tier(line)


def on_priority_reference(state: ScanState, line: str, document: ParsedDocument) -> None:
    record_priority_references(document.metadata, state.priority_tier, line)


def on_automation_heading(state: ScanState, line: str, document: ParsedDocument) -> None:
    state.collecting_automation = True


def on_automation_item(state: ScanState, line: str, document: ParsedDocument) -> None:
    record_automation_recommendation(document.metadata, line)


def on_ignored(state: ScanState, line: str, document: ParsedDocument) -> None:
    pass


def on_text(state: ScanState, line: str, document: ParsedDocument) -> None:
    if state.draft is not None:
        state.draft.append_description(line)


Transition = Callable[[ScanState, str, ParsedDocument], None]

TRANSITIONS: Dict[LineKind, Transition] = {
    LineKind.SECTION_HEADER: on_section_header,
    LineKind.SUBSECTION_HEADER: on_subsection_header,
    LineKind.TEST_CASE_ID: on_test_case_id,
    LineKind.EXPECTED_RESULT: on_expected_result,
    LineKind.PRIORITY_MARKER: on_priority_marker,
    LineKind.AUTOMATION_MARKER: on_automation_marker,
    LineKind.PRIORITY_TIER: on_priority_tier,
    LineKind.PRIORITY_REFERENCE: on_priority_reference,
    LineKind.PRIORITY_OTHER: on_ignored,
    LineKind.AUTOMATION_HEADING: on_automation_heading,
    LineKind.AUTOMATION_ITEM: on_automation_item,
    LineKind.TEXT: on_text,
}

_PRIORITY_RUN = (LineKind.PRIORITY_TIER, LineKind.PRIORITY_REFERENCE)
_AUTOMATION_RUN = (LineKind.AUTOMATION_HEADING, LineKind.AUTOMATION_ITEM)


def step(state: ScanState, line: str, document: ParsedDocument) -> LineKind:
    """Consume one line and return the kind it was handled as."""
    kind = classify_line(line, state)
    # Tier references and recommendations only count while contiguous
    if kind not in _PRIORITY_RUN:
        state.priority_tier = None
    if kind not in _AUTOMATION_RUN:
        state.collecting_automation = False
    TRANSITIONS[kind](state, line, document)
    return kind


def _index_test_cases(document: ParsedDocument) -> None:
    for draft in document.test_cases:
        subsection = document.find_subsection(draft.section, draft.subsection)
        if subsection is not None:
            subsection.test_cases.append(draft)


def parse_hierarchical(text: str) -> ParsedDocument:
    """Parse sections, subsections, test cases and metadata blocks of ``text``."""
    document = ParsedDocument()
    state = ScanState()

    for line in normalize_lines(text):
        step(state, line, document)
    finalize_draft(state, document)

    document.test_cases = assemble(
        document.test_cases,
        document.metadata.priorities,
        document.metadata.automation_recommendations,
    )
    _index_test_cases(document)
    return document
