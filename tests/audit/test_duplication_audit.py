from __future__ import annotations

from pathlib import Path

import pytest

from rulebook.core.audit import duplication_matrix, jaccard, text_shingles
from rulebook.core.discovery import DocumentRecord, discover_documents

PARAGRAPH = (
    "Every public endpoint returns a problem details body with a stable type uri "
    "a short title and a detail message that never leaks stack traces or internal identifiers "
    "so that clients can branch on the type while humans read the detail"
)


def _write(path: Path, text: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


def test_text_shingles_ignore_headings_and_code() -> None:
    text = "# Title words here\n\n```\ncode words that should vanish entirely from shingles\n```\n" + PARAGRAPH
    plain = text_shingles(PARAGRAPH, k=12)
    assert text_shingles(text, k=12) == plain
    assert plain


def test_short_documents_have_no_shingles() -> None:
    assert text_shingles("too short to shingle", k=12) == set()
    assert jaccard(set(), {("a",)}) == 0.0


def test_near_duplicates_are_reported(repo: Path, config: dict) -> None:
    _write(repo / "rules" / "api" / "errors.md", f"# Errors\n\n{PARAGRAPH}\n")
    _write(repo / "rules" / "api" / "errors-copy.md", f"# Errors (copy)\n\n{PARAGRAPH}\n")
    _write(repo / "rules" / "naming.md", "# Naming\n\n" + " ".join(f"word{i}" for i in range(40)) + "\n")

    records = discover_documents(repo, config)
    pairs = duplication_matrix(records, k=12, min_similarity=0.8)

    assert len(pairs) == 1
    pair = pairs[0]
    assert pair.similarity == pytest.approx(1.0)
    assert {pair.a.path.name, pair.b.path.name} == {"errors.md", "errors-copy.md"}
    data = pair.to_dict(repo)
    assert data["a"]["category"] == "api"
    assert data["a"]["path"].startswith("rules/api/")


def test_threshold_filters_pairs(tmp_path: Path) -> None:
    a = _write(tmp_path / "a.md", PARAGRAPH + " alpha beta gamma delta epsilon zeta eta theta")
    b = _write(tmp_path / "b.md", PARAGRAPH + " one two three four five six seven eight")
    records = [DocumentRecord(path=a), DocumentRecord(path=b)]

    loose = duplication_matrix(records, k=12, min_similarity=0.1)
    strict = duplication_matrix(records, k=12, min_similarity=0.99)

    assert len(loose) == 1
    assert 0.1 <= loose[0].similarity < 0.99
    assert strict == []


def test_discovery_skips_readme_and_reads_kind(repo: Path, config: dict) -> None:
    _write(repo / "rules" / "README.md", "# Index\n")
    _write(repo / "rules" / "rest.md", "# REST\n")
    _write(repo / "rules" / "specs" / "export.md", "---\nkind: feature-spec\n---\n# Export\n")

    records = discover_documents(repo, config)

    assert [(r.relpath(repo).as_posix(), r.kind, r.category) for r in records] == [
        ("rules/rest.md", "rule", None),
        ("rules/specs/export.md", "feature-spec", "specs"),
    ]


def test_discovery_without_rules_dir(tmp_path: Path, config: dict) -> None:
    assert discover_documents(tmp_path / "elsewhere", config) == []
