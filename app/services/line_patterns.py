"""Line grammar of the hierarchical test case convention.

    1. BASIC FUNCTIONALITY TEST CASES        <- section header
    1.1 User Authentication                  <- subsection header
    TC001: Verify login with valid account   <- test case id line
    Expected Result: User lands on dashboard <- closes the test case

    TEST EXECUTION PRIORITY                  <- priority block marker
    P0 - Critical (Must Pass)                <- priority tier header
    - TC001, TC002                           <- id references

    AUTOMATION RECOMMENDATIONS               <- automation block marker
    High Priority for Automation
    - Basic login flow                       <- recommendation
"""

import re

SECTION_HEADER = re.compile(r"^\d+\.\s+[A-Z][A-Z\s]*$")
SUBSECTION_HEADER = re.compile(r"^\d+\.\d+\s+[A-Z]")
SECTION_NUMBER = re.compile(r"^\d+\.\s+")
SUBSECTION_NUMBER = re.compile(r"^\d+\.\d+\s+")

TEST_CASE_ID = re.compile(r"TC\d{3}")
TEST_CASE_ID_LINE = re.compile(r"^(TC\d{3}):(.*)$")

EXPECTED_RESULT_LABEL = "Expected Result:"
PRIORITY_BLOCK_MARKER = "TEST EXECUTION PRIORITY"
AUTOMATION_BLOCK_MARKER = "AUTOMATION RECOMMENDATIONS"
HIGH_AUTOMATION_HEADING = "High Priority for Automation"
LIST_BULLET = "-"


def is_section_header(line: str) -> bool:
    return bool(SECTION_HEADER.match(line))


def is_subsection_header(line: str) -> bool:
    return bool(SUBSECTION_HEADER.match(line))


def is_test_case_id_line(line: str) -> bool:
    return bool(TEST_CASE_ID_LINE.match(line))


def is_expected_result_line(line: str) -> bool:
    return line.startswith(EXPECTED_RESULT_LABEL)


def is_list_item(line: str) -> bool:
    return line.startswith(LIST_BULLET)


def strip_bullet(line: str) -> str:
    return line[len(LIST_BULLET):].strip() if is_list_item(line) else line.strip()


def display_title(heading: str) -> str:
    """Heading text without its leading enumeration ("1.2 Foo" -> "Foo")."""
    title = SUBSECTION_NUMBER.sub("", heading, count=1)
    if title == heading:
        title = SECTION_NUMBER.sub("", heading, count=1)
    return title


# Labelled fields of the flat convention ("Title: ...", "Expected Result: ...")
FIELD_LABEL = re.compile(
    r"^(test case id|test case name|test case|title|description|preconditions?|"
    r"steps to reproduce|test steps|steps|expected results?|expected|"
    r"test priority|priority|test status|status)\s*:",
    re.IGNORECASE,
)
