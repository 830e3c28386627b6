import pytest

from app.models.importer import ParsedDocument, TestCasePriority, TestCaseDraft, NOT_PRIORITIZED
from app.services.hierarchical_parser import (
    LineKind,
    ScanMode,
    ScanState,
    classify_line,
    on_automation_marker,
    on_priority_marker,
    on_text,
    parse_hierarchical,
    step,
)


SINGLE_CASE = "1. S\n1.1 Sub\nTC001: T\nExpected Result: R"


def test_parses_single_test_case():
    document = parse_hierarchical(SINGLE_CASE)

    assert len(document.test_cases) == 1
    case = document.test_cases[0]
    assert case.id == "TC001"
    assert case.title == "T"
    assert "S" in case.section
    assert "Sub" in case.subsection
    assert case.expected_result == "R"


def test_builds_section_tree():
    document = parse_hierarchical(SINGLE_CASE)

    section = document.sections["1. S"]
    assert section.title == "S"
    subsection = section.subsections["1.1 Sub"]
    assert subsection.title == "Sub"
    assert [case.id for case in subsection.test_cases] == ["TC001"]


def test_parses_full_document(hierarchical_text):
    document = parse_hierarchical(hierarchical_text)

    assert [case.id for case in document.test_cases] == ["TC001", "TC002", "TC003", "TC004"]
    assert list(document.sections) == ["1. BASIC FUNCTIONALITY TEST CASES", "2. ADVANCED FEATURES"]
    basic = document.sections["1. BASIC FUNCTIONALITY TEST CASES"]
    assert list(basic.subsections) == ["1.1 User Authentication", "1.2 User Registration"]
    assert basic.title == "BASIC FUNCTIONALITY TEST CASES"

    first = document.test_cases[0]
    assert first.title == "Verify basic login flow with valid credentials"
    assert first.description == "Open the login page and submit a valid account."
    assert first.subsection == "1.1 User Authentication"


def test_every_indexed_case_appears_once(hierarchical_text):
    document = parse_hierarchical(hierarchical_text)

    indexed = [
        case
        for section in document.sections.values()
        for subsection in section.subsections.values()
        for case in subsection.test_cases
    ]
    assert sorted(case.id for case in indexed) == sorted(case.id for case in document.test_cases)
    # The tree holds the enriched cases
    assert indexed[0].priority == TestCasePriority.HIGH


def test_title_keeps_additional_colons():
    document = parse_hierarchical("1. A\n1.1 B\nTC001: Login: valid account\nExpected Result: ok")
    assert document.test_cases[0].title == "Login: valid account"


def test_multiline_description_is_space_joined():
    text = "1. A\n1.1 B\nTC001: Login\nOpen the page\n\n  Submit the form  \nExpected Result: ok"
    document = parse_hierarchical(text)
    assert document.test_cases[0].description == "Open the page Submit the form"


def test_priority_block():
    text = """1. BASIC FUNCTIONALITY TEST CASES
1.1 User Authentication
TC001: Verify user login with valid credentials
Expected Result: User is logged in and redirected to dashboard

TEST EXECUTION PRIORITY
P0 - Critical (Must Pass)
- TC001"""
    document = parse_hierarchical(text)

    assert document.metadata.priorities["TC001"] == TestCasePriority.HIGH
    assert document.test_cases[0].priority == TestCasePriority.HIGH


def test_priority_tiers_and_defaults(hierarchical_text):
    document = parse_hierarchical(hierarchical_text)
    priorities = {case.id: case.priority for case in document.test_cases}

    assert priorities == {
        "TC001": TestCasePriority.HIGH,
        "TC002": TestCasePriority.HIGH,
        "TC003": TestCasePriority.MEDIUM,
        "TC004": TestCasePriority.LOW,
    }
    assert "TC003" not in document.metadata.priorities


def test_later_priority_entries_overwrite_earlier_ones():
    text = """TEST EXECUTION PRIORITY
P0 - Critical
- TC001
P3 - Low
- TC001"""
    document = parse_hierarchical(text)
    assert document.metadata.priorities == {"TC001": TestCasePriority.LOW}


def test_repeated_tier_headers_use_their_own_references():
    text = """TEST EXECUTION PRIORITY
P0 - Critical
- TC001
P3 - Low
- TC002
P0 - Critical
- TC003"""
    document = parse_hierarchical(text)
    assert document.metadata.priorities == {
        "TC001": TestCasePriority.HIGH,
        "TC002": TestCasePriority.LOW,
        "TC003": TestCasePriority.HIGH,
    }


def test_priority_references_stop_at_first_non_bullet_line():
    text = """TEST EXECUTION PRIORITY
P1 - High
- TC001
Notes for the release
- TC002"""
    document = parse_hierarchical(text)
    assert document.metadata.priorities == {"TC001": TestCasePriority.HIGH}


def test_unknown_tier_defaults_to_medium():
    document = parse_hierarchical("TEST EXECUTION PRIORITY\nP9 - Someday\n- TC001")
    assert document.metadata.priorities["TC001"] == TestCasePriority.MEDIUM


def test_automation_block():
    text = """1. BASIC FUNCTIONALITY TEST CASES
1.1 User Authentication
TC001: Verify user login with valid credentials
Expected Result: User is logged in and redirected to dashboard

AUTOMATION RECOMMENDATIONS
High Priority for Automation
- Basic login flow
- User authentication"""
    document = parse_hierarchical(text)

    assert document.metadata.automation_recommendations == {
        "Basic login flow": "High",
        "User authentication": "High",
    }


def test_automation_status_is_merged(hierarchical_text):
    document = parse_hierarchical(hierarchical_text)
    statuses = {case.id: case.automation_status for case in document.test_cases}

    assert statuses["TC001"] == "High"
    assert statuses["TC002"] == "High"
    assert statuses["TC003"] == NOT_PRIORITIZED


def test_other_automation_headings_are_not_collected():
    text = """AUTOMATION RECOMMENDATIONS
High Priority for Automation
- Checkout
Medium Priority for Automation
- Profile settings"""
    document = parse_hierarchical(text)
    assert document.metadata.automation_recommendations == {"Checkout": "High"}


def test_new_id_line_finalizes_open_draft():
    text = """1. A
1.1 B
TC001: First case
Details that must survive
TC002: Second case
Expected Result: ok"""
    document = parse_hierarchical(text)

    first, second = document.test_cases
    assert first.id == "TC001"
    assert first.expected_result == ""
    assert first.description == "Details that must survive"
    assert second.expected_result == "ok"
    assert len(document.sections["1. A"].subsections["1.1 B"].test_cases) == 2


def test_unterminated_draft_is_emitted_at_end():
    document = parse_hierarchical("1. A\n1.1 B\nTC001: Only case\nsome details")

    assert len(document.test_cases) == 1
    assert document.test_cases[0].description == "some details"
    assert document.test_cases[0].expected_result == ""
    assert document.sections["1. A"].subsections["1.1 B"].test_cases[0].id == "TC001"


def test_repeated_headings_are_reused():
    text = """1. LOGIN
1.1 Valid account
TC001: A
Expected Result: a
2. OTHER
1. LOGIN
1.1 Valid account
TC002: B
Expected Result: b"""
    document = parse_hierarchical(text)

    assert list(document.sections) == ["1. LOGIN", "2. OTHER"]
    cases = document.sections["1. LOGIN"].subsections["1.1 Valid account"].test_cases
    assert [case.id for case in cases] == ["TC001", "TC002"]


def test_subsection_without_section_is_not_indexed():
    document = parse_hierarchical("1.1 Orphan\nTC001: A\nExpected Result: a")

    assert document.sections == {}
    assert document.test_cases[0].subsection == "1.1 Orphan"
    assert document.test_cases[0].section == ""


def test_expected_result_without_draft_is_ignored():
    document = parse_hierarchical("1. A\nExpected Result: orphan\nrandom text")
    assert document.test_cases == []


def test_empty_text_yields_empty_document():
    document = parse_hierarchical("")
    assert document == ParsedDocument()
    assert document.metadata.priorities == {}
    assert document.metadata.automation_recommendations == {}


def test_parse_is_idempotent(hierarchical_text):
    assert parse_hierarchical(hierarchical_text) == parse_hierarchical(hierarchical_text)


@pytest.mark.parametrize(
    "line,kind",
    [
        ("1. BASIC FUNCTIONALITY", LineKind.SECTION_HEADER),
        ("12. A", LineKind.SECTION_HEADER),
        ("1.1 User Authentication", LineKind.SUBSECTION_HEADER),
        ("TC001: Login", LineKind.TEST_CASE_ID),
        ("Expected Result: ok", LineKind.EXPECTED_RESULT),
        ("TEST EXECUTION PRIORITY", LineKind.PRIORITY_MARKER),
        ("AUTOMATION RECOMMENDATIONS", LineKind.AUTOMATION_MARKER),
        ("1. Open the login page", LineKind.TEXT),
        ("TC01: too short", LineKind.TEXT),
        ("- TC001", LineKind.TEXT),
    ],
)
def test_classify_line_in_body(line, kind):
    assert classify_line(line, ScanState()) == kind


def test_classify_line_in_priority_block():
    state = ScanState(mode=ScanMode.PRIORITY_BLOCK)
    assert classify_line("P0 - Critical", state) == LineKind.PRIORITY_TIER
    assert classify_line("- TC001", state) == LineKind.PRIORITY_OTHER

    state.priority_tier = TestCasePriority.HIGH
    assert classify_line("- TC001", state) == LineKind.PRIORITY_REFERENCE
    assert classify_line("Some note", state) == LineKind.PRIORITY_OTHER


def test_classify_line_in_automation_block():
    state = ScanState(mode=ScanMode.AUTOMATION_BLOCK)
    assert classify_line("High Priority for Automation", state) == LineKind.AUTOMATION_HEADING
    assert classify_line("- Checkout", state) == LineKind.TEXT

    state.collecting_automation = True
    assert classify_line("- Checkout", state) == LineKind.AUTOMATION_ITEM


def test_block_markers_are_mutually_exclusive():
    state = ScanState()
    document = ParsedDocument()

    on_priority_marker(state, "TEST EXECUTION PRIORITY", document)
    assert state.mode is ScanMode.PRIORITY_BLOCK
    on_automation_marker(state, "AUTOMATION RECOMMENDATIONS", document)
    assert state.mode is ScanMode.AUTOMATION_BLOCK
    on_priority_marker(state, "TEST EXECUTION PRIORITY", document)
    assert state.mode is ScanMode.PRIORITY_BLOCK


def test_step_ends_reference_run_on_other_lines():
    state = ScanState(mode=ScanMode.PRIORITY_BLOCK)
    document = ParsedDocument()

    assert step(state, "P2 - Medium", document) == LineKind.PRIORITY_TIER
    assert state.priority_tier == TestCasePriority.MEDIUM
    assert step(state, "- TC005 TC006", document) == LineKind.PRIORITY_REFERENCE
    assert step(state, "Notes", document) == LineKind.PRIORITY_OTHER
    assert state.priority_tier is None
    assert document.metadata.priorities == {
        "TC005": TestCasePriority.MEDIUM,
        "TC006": TestCasePriority.MEDIUM,
    }


def test_text_without_open_draft_is_dropped():
    state = ScanState()
    document = ParsedDocument()
    on_text(state, "stray line", document)
    assert document.test_cases == []

    state.draft = TestCaseDraft(id="TC001", title="A")
    on_text(state, "first", document)
    on_text(state, "second", document)
    assert state.draft.description == "first second"
