"""Heuristic detection of the structural convention of pasted text.

Each supported convention gets an independent score in [0, 1]; the verdict
is the best scoring one. Scores reflect how many structural signals the
text carries relative to its size, not a probability.
"""

from typing import Dict, List, Sequence

from app.models.importer import FormatVerdict, ImportFormat, RawDocument
from app.services import line_patterns as patterns
from app.services.text_normalizer import normalize_lines, split_row

# Ties go to the earlier entry
FORMAT_ORDER = (
    ImportFormat.HIERARCHICAL,
    ImportFormat.TABULAR,
    ImportFormat.FLAT,
    ImportFormat.FREEFORM,
)

FREEFORM_CONFIDENCE = 0.3
TAB_MAX_CONFIDENCE = 0.95
COMMA_MAX_CONFIDENCE = 0.9
FLAT_MAX_CONFIDENCE = 0.7


def count_complete_pairs(lines: Sequence[str]) -> int:
    """Id lines followed by an expected-result line before the next id line."""
    starts = [index for index, line in enumerate(lines) if patterns.is_test_case_id_line(line)]
    ends = starts[1:] + [len(lines)]
    return sum(
        1
        for start, end in zip(starts, ends)
        if any(patterns.is_expected_result_line(line) for line in lines[start + 1:end])
    )


def score_hierarchical(lines: RawDocument) -> float:
    sections = sum(1 for line in lines if patterns.is_section_header(line))
    subsections = sum(1 for line in lines if patterns.is_subsection_header(line))
    ids = sum(1 for line in lines if patterns.is_test_case_id_line(line))
    expected = sum(1 for line in lines if patterns.is_expected_result_line(line))

    if ids == 0 or (sections == 0 and subsections == 0):
        return 0.0

    pairs = count_complete_pairs(lines)
    consistency = pairs / ids
    density = (sections + subsections + ids + expected) / len(lines)

    score = 0.4
    score += 0.2 if sections else 0.0
    score += 0.15 if subsections else 0.0
    score += 0.2 * min(pairs, 2) / 2
    score += 0.05 * (consistency + density) / 2
    return min(score, 1.0)


def _field_counts(lines: Sequence[str], delimiter: str) -> List[int]:
    return [len(split_row(line, delimiter)) for line in lines]


def score_tabular(lines: RawDocument) -> float:
    if len(lines) < 2:
        return 0.0
    header = lines[0]
    if "\t" in header:
        delimiter, ceiling = "\t", TAB_MAX_CONFIDENCE
    elif "," in header:
        delimiter, ceiling = ",", COMMA_MAX_CONFIDENCE
    else:
        return 0.0

    counts = _field_counts(lines, delimiter)
    expected_columns = counts[0]
    consistent = sum(1 for count in counts[1:] if count == expected_columns)
    return ceiling * consistent / (len(counts) - 1)


def score_flat(lines: RawDocument) -> float:
    labelled = sum(1 for line in lines if patterns.FIELD_LABEL.match(line))
    if labelled == 0:
        return 0.0
    return 0.5 + (FLAT_MAX_CONFIDENCE - 0.5) * min(labelled, 3) / 3


def score_formats(lines: RawDocument) -> Dict[ImportFormat, float]:
    if not lines:
        return {fmt: 0.0 for fmt in FORMAT_ORDER}
    return {
        ImportFormat.HIERARCHICAL: score_hierarchical(lines),
        ImportFormat.TABULAR: score_tabular(lines),
        ImportFormat.FLAT: score_flat(lines),
        ImportFormat.FREEFORM: FREEFORM_CONFIDENCE,
    }


def classify(text: str) -> FormatVerdict:
    """Score every supported convention and return the best match."""
    lines = normalize_lines(text)
    scores = {fmt: round(score, 4) for fmt, score in score_formats(lines).items()}

    if not lines:
        return FormatVerdict(format=ImportFormat.UNKNOWN, confidence=0.0, scores=scores)

    best = FORMAT_ORDER[0]
    for fmt in FORMAT_ORDER[1:]:
        if scores[fmt] > scores[best]:
            best = fmt
    return FormatVerdict(format=best, confidence=scores[best], scores=scores)
