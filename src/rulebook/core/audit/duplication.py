"""
Duplication audit across rule documents.

Each document is reduced to a set of k-word shingles (headings and fenced
code ignored). Pairs whose Jaccard index reaches ``min_similarity`` are
reported, most similar first.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Set, Tuple

from rulebook.core.discovery import DocumentRecord
from rulebook.core.utils.io import read_text
from rulebook.core.utils.text import shingles, strip_headings_and_code, tokenize

logger = logging.getLogger(__name__)

Shingle = Tuple[str, ...]


@dataclass
class DuplicatePair:
    a: DocumentRecord
    b: DocumentRecord
    similarity: float
    intersection: int
    union: int

    def to_dict(self, repo_root: Optional[Path] = None) -> Dict[str, Any]:
        return {
            "a": {"path": str(self.a.relpath(repo_root)), "category": self.a.category},
            "b": {"path": str(self.b.relpath(repo_root)), "category": self.b.category},
            "similarity": round(self.similarity, 4),
            "intersection": self.intersection,
            "union": self.union,
        }


def text_shingles(text: str, *, k: int = 12) -> Set[Shingle]:
    """Return k-word shingles for markdown text (headings/code ignored)."""
    return shingles(tokenize(strip_headings_and_code(text)), k=k)


def build_shingle_index(records: Iterable[DocumentRecord], *, k: int = 12) -> Dict[Path, Set[Shingle]]:
    index: Dict[Path, Set[Shingle]] = {}
    for rec in records:
        if rec.path in index:
            continue
        index[rec.path] = text_shingles(read_text(rec.path), k=k)
    return index


def jaccard(a: Set[Shingle], b: Set[Shingle]) -> float:
    """Jaccard index of two shingle sets; empty sets are never similar.

    Example:
        >>> jaccard({("a",), ("b",)}, {("b",), ("c",)})
        0.3333333333333333
    """
    if not a or not b:
        return 0.0
    return len(a & b) / len(a | b)


def duplication_matrix(
    records: Iterable[DocumentRecord],
    *,
    k: int = 12,
    min_similarity: float = 0.8,
) -> List[DuplicatePair]:
    """Return document pairs with similarity >= ``min_similarity``."""
    recs = list(records)
    index = build_shingle_index(recs, k=k)
    pairs: List[DuplicatePair] = []

    for i, a in enumerate(recs):
        sa = index.get(a.path) or set()
        if not sa:
            continue
        for b in recs[i + 1 :]:
            sb = index.get(b.path) or set()
            inter = sa & sb
            if not inter:
                continue
            union = sa | sb
            similarity = len(inter) / len(union)
            if similarity < min_similarity:
                continue
            pairs.append(
                DuplicatePair(
                    a=a, b=b, similarity=similarity, intersection=len(inter), union=len(union)
                )
            )

    pairs.sort(key=lambda p: (-p.similarity, str(p.a.path), str(p.b.path)))
    logger.info("Duplication audit: %d document(s), %d similar pair(s)", len(recs), len(pairs))
    return pairs


__all__ = ["DuplicatePair", "build_shingle_index", "duplication_matrix", "jaccard", "text_shingles"]
