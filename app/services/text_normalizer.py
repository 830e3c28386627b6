import csv
from itertools import takewhile
from typing import Callable, Iterable, List, Optional, TypeVar

from app.models.importer import RawDocument

T = TypeVar("T")


def normalize_lines(text: Optional[str]) -> RawDocument:
    """Split text into trimmed lines, dropping the blank ones."""
    if not text:
        return ()
    return tuple(line.strip() for line in text.splitlines() if line.strip())


def take_while(items: Iterable[T], predicate: Callable[[T], bool]) -> List[T]:
    """Leading run of ``items`` for which ``predicate`` holds."""
    return list(takewhile(predicate, items))


def split_row(line: str, delimiter: str) -> List[str]:
    """Cells of a single delimited row; quotes never carry over to the next row."""
    try:
        return next(csv.reader([line], delimiter=delimiter), [])
    except csv.Error:
        # Cells past the csv field size limit
        return line.split(delimiter)
