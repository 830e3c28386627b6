from typing import Dict, Iterable, List, Mapping

from app.models.importer import NOT_PRIORITIZED, TestCaseDraft, TestCasePriority
from app.services.metadata_extractor import DEFAULT_PRIORITY


def determine_automation_status(
    draft: TestCaseDraft, recommendations: Mapping[str, str]
) -> str:
    """Strength of the first recommendation mentioned by the draft's text.

    Matching is a case-insensitive substring search over title and
    description, in the recommendations' insertion order.
    """
    haystack = f"{draft.title} {draft.description}".lower()
    for recommendation, strength in recommendations.items():
        if recommendation.lower() in haystack:
            return strength
    return NOT_PRIORITIZED


def assemble(
    drafts: Iterable[TestCaseDraft],
    priorities: Mapping[str, TestCasePriority],
    automation_recommendations: Mapping[str, str],
) -> List[TestCaseDraft]:
    """Copies of ``drafts`` with priority and automation status filled in."""
    assembled: List[TestCaseDraft] = []
    for draft in drafts:
        updates: Dict[str, object] = {
            "priority": priorities.get(draft.id, DEFAULT_PRIORITY),
            "automation_status": determine_automation_status(draft, automation_recommendations),
        }
        assembled.append(draft.model_copy(update=updates))
    return assembled
