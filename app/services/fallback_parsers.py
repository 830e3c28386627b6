"""Parsers for pasted text that does not follow the hierarchical convention.

Spreadsheet copies (tab or comma separated), labelled-field blocks and
plain prose are all turned into ``TestCaseDraft`` objects so that the
import preview can treat every format the same way. Drafts without an id
in the source get a positional one (``TC001``, ``TC002`` ...).
"""

from typing import Dict, List, Optional

from app.models.importer import TestCaseDraft, TestCasePriority
from app.services import line_patterns as patterns
from app.services.metadata_extractor import DEFAULT_PRIORITY
from app.services.text_normalizer import normalize_lines, split_row, take_while

PRIORITY_WORDS = {
    "critical": TestCasePriority.HIGH,
    "urgent": TestCasePriority.HIGH,
    "blocker": TestCasePriority.HIGH,
    "p0": TestCasePriority.HIGH,
    "high": TestCasePriority.HIGH,
    "p1": TestCasePriority.HIGH,
    "medium": TestCasePriority.MEDIUM,
    "normal": TestCasePriority.MEDIUM,
    "p2": TestCasePriority.MEDIUM,
    "low": TestCasePriority.LOW,
    "minor": TestCasePriority.LOW,
    "p3": TestCasePriority.LOW,
}

# Column header spellings seen in exported spreadsheets
HEADER_ALIASES = {
    "id": ("test case id", "tc id", "case id", "id"),
    "title": ("test case", "test case name", "title", "name", "summary", "scenario"),
    "description": ("description", "details", "objective", "steps", "test steps"),
    "expected_result": ("expected result", "expected results", "expected", "expected outcome"),
    "priority": ("priority", "test priority"),
    "section": ("section", "module", "feature"),
    "subsection": ("subsection", "sub section", "area"),
}


def positional_id(position: int) -> str:
    return f"TC{position:03d}"


def coerce_priority(label: Optional[str]) -> TestCasePriority:
    """Map free-text priority words ("Critical", "p2", "minor") to a priority."""
    if not label:
        return DEFAULT_PRIORITY
    word = label.strip().lower()
    # "P1 (High)" style labels
    word = word.split("(")[0].strip() or word
    return PRIORITY_WORDS.get(word, DEFAULT_PRIORITY)


def _join(existing: str, addition: str) -> str:
    if not existing:
        return addition
    if not addition:
        return existing
    return f"{existing} {addition}"


def _map_columns(header: List[str]) -> Dict[str, int]:
    columns: Dict[str, int] = {}
    normalized = [cell.strip().lower() for cell in header]
    for field, aliases in HEADER_ALIASES.items():
        for index, name in enumerate(normalized):
            if name in aliases and index not in columns.values():
                columns[field] = index
                break
    if "title" not in columns and normalized and 0 not in columns.values():
        columns["title"] = 0
    return columns


def parse_tabular(text: str) -> List[TestCaseDraft]:
    """Rows of a tab or comma separated table with a header row."""
    # Rows keep their leading delimiters so empty first cells stay in place
    lines = [line for line in (text or "").splitlines() if line.strip()]
    if len(lines) < 2:
        return []

    delimiter = "\t" if "\t" in lines[0] else ","
    rows = [split_row(line, delimiter) for line in lines]
    columns = _map_columns(rows[0])

    def cell(row: List[str], field: str) -> str:
        index = columns.get(field)
        if index is None or index >= len(row):
            return ""
        return row[index].strip()

    drafts: List[TestCaseDraft] = []
    for row in rows[1:]:
        if not any(value.strip() for value in row):
            continue
        position = len(drafts) + 1
        drafts.append(
            TestCaseDraft(
                id=cell(row, "id") or positional_id(position),
                title=cell(row, "title"),
                section=cell(row, "section"),
                subsection=cell(row, "subsection"),
                description=cell(row, "description"),
                expected_result=cell(row, "expected_result"),
                priority=coerce_priority(cell(row, "priority")),
            )
        )
    return drafts


def _flat_field(label: str) -> Optional[str]:
    label = label.strip().lower()
    if label == "test case id":
        return "id"
    if label in ("test case name", "test case", "title"):
        return "title"
    if label.startswith("expected"):
        return "expected_result"
    if "steps" in label:
        return "steps"
    if label.startswith("precondition"):
        return "preconditions"
    if label.endswith("priority"):
        return "priority"
    if label == "description":
        return "description"
    # Status is owned by the test run, not the import
    return None


def _draft_from_fields(fields: Dict[str, str], position: int) -> TestCaseDraft:
    description = fields.get("description", "")
    if fields.get("preconditions"):
        description = _join(description, f"Preconditions: {fields['preconditions']}")
    if fields.get("steps"):
        description = _join(description, f"Steps: {fields['steps']}")
    return TestCaseDraft(
        id=fields.get("id") or positional_id(position),
        title=fields.get("title", ""),
        description=description,
        expected_result=fields.get("expected_result", ""),
        priority=coerce_priority(fields.get("priority")),
    )


def parse_flat(text: str) -> List[TestCaseDraft]:
    """Blocks of ``Label: value`` lines, one block per test case.

    A second ``Title:`` or ``Test Case ID:`` label starts the next case;
    unlabelled lines continue the previous field.
    """
    blocks: List[Dict[str, str]] = []
    current: Dict[str, str] = {}
    last_field: Optional[str] = None

    for line in normalize_lines(text):
        match = patterns.FIELD_LABEL.match(line)
        if match is None:
            if last_field:
                current[last_field] = _join(current.get(last_field, ""), line)
            continue

        field = _flat_field(match.group(1))
        value = line[match.end():].strip()
        if field in ("id", "title") and current.get(field):
            blocks.append(current)
            current = {}
        last_field = field
        if field is not None:
            current[field] = _join(current.get(field, ""), value)

    if current:
        blocks.append(current)
    return [_draft_from_fields(fields, position) for position, fields in enumerate(blocks, start=1)]


def parse_freeform(text: str) -> List[TestCaseDraft]:
    """A single case: first line is the title, the rest its description."""
    lines = normalize_lines(text)
    if not lines:
        return []

    rest = lines[1:]
    body = take_while(rest, lambda line: not patterns.is_expected_result_line(line))
    trailer = rest[len(body):]
    expected_result = ""
    if trailer:
        expected_result = trailer[0][len(patterns.EXPECTED_RESULT_LABEL):].strip()
        body.extend(trailer[1:])

    return [
        TestCaseDraft(
            id=positional_id(1),
            title=lines[0],
            description=" ".join(body),
            expected_result=expected_result,
        )
    ]
