"""Merge result sets from several queries/providers, first occurrence wins."""
from __future__ import annotations

from typing import Iterable

from jobassist.models import ResultItem


def merge(result_sets: Iterable[Iterable[ResultItem]]) -> list[ResultItem]:
    """Concatenate *result_sets* in order, dropping items whose ``id`` was already seen."""
    merged: list[ResultItem] = []
    seen: set[str] = set()
    for batch in result_sets:
        for item in batch:
            if item.id in seen:
                continue
            seen.add(item.id)
            merged.append(item)
    return merged
