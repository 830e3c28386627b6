"""Priority and automation blocks of a hierarchical document.

The functions here are called from the structure scan while it is inside
one of the two metadata blocks; they only ever write into the
``ImportMetadata`` they are given.
"""

from typing import List, Optional, Tuple

from app.models.importer import (
    HIGH_AUTOMATION_STRENGTH,
    ImportMetadata,
    TestCasePriority,
)
from app.services.line_patterns import (
    LIST_BULLET,
    TEST_CASE_ID,
    is_list_item,
    strip_bullet,
)

DEFAULT_PRIORITY = TestCasePriority.MEDIUM

TIER_PRIORITIES = {
    "P0": TestCasePriority.HIGH,
    "P1": TestCasePriority.HIGH,
    "P2": TestCasePriority.MEDIUM,
    "P3": TestCasePriority.LOW,
}


def normalize_priority(tier: str) -> TestCasePriority:
    """Map a tier token such as ``P0`` to a priority; unknown tiers are medium."""
    return TIER_PRIORITIES.get(tier.strip().upper(), DEFAULT_PRIORITY)


def is_priority_tier_header(line: str) -> bool:
    return line.startswith("P") and LIST_BULLET in line


def parse_priority_tier(line: str) -> Tuple[TestCasePriority, str]:
    """Split ``"P0 - Critical (Must Pass)"`` into its priority and label."""
    tier, _, label = line.partition(LIST_BULLET)
    return normalize_priority(tier), label.strip()


def extract_test_case_ids(line: str) -> List[str]:
    return TEST_CASE_ID.findall(strip_bullet(line))


def record_priority_references(
    metadata: ImportMetadata, priority: TestCasePriority, line: str
) -> List[str]:
    """Assign ``priority`` to every id referenced on a ``- TC001, TC002`` line."""
    ids = extract_test_case_ids(line)
    for test_case_id in ids:
        metadata.priorities[test_case_id] = priority
    return ids


def record_automation_recommendation(
    metadata: ImportMetadata, line: str, strength: str = HIGH_AUTOMATION_STRENGTH
) -> Optional[str]:
    if not is_list_item(line):
        return None
    recommendation = strip_bullet(line)
    if not recommendation:
        return None
    metadata.automation_recommendations[recommendation] = strength
    return recommendation
