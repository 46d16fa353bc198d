import os
import sys
from pathlib import Path

import pytest

# Keep the repository free of Python bytecode and __pycache__ artifacts during tests.
sys.dont_write_bytecode = True

TESTS_ROOT = Path(__file__).resolve().parent
REPO_ROOT = TESTS_ROOT.parent
SRC_ROOT = REPO_ROOT / "src"

# Make src/ importable as 'rulebook' and tests/ importable for 'helpers'
for p in (SRC_ROOT, TESTS_ROOT):
    if str(p) not in sys.path:
        sys.path.insert(0, str(p))

from rulebook.core.audit.stdlib_logging import reset_stdlib_logging_for_tests
from rulebook.core.config import ConfigManager
from rulebook.core.schema import DocumentSchema
from rulebook.core.validator import DocumentValidator
from rulebook.data import clear_caches


@pytest.fixture(autouse=True)
def _isolate_rulebook_env(monkeypatch: pytest.MonkeyPatch):
    """Drop RULEBOOK_* variables from the developer shell and reset global state."""
    for key in list(os.environ):
        if key.startswith("RULEBOOK_"):
            monkeypatch.delenv(key, raising=False)
    clear_caches()
    yield
    reset_stdlib_logging_for_tests()
    clear_caches()


@pytest.fixture
def repo(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolated project: ``.rulebook/config`` and ``rules/`` under ``tmp_path``."""
    (tmp_path / ".rulebook" / "config").mkdir(parents=True)
    (tmp_path / "rules").mkdir()
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture
def config(repo: Path) -> dict:
    return ConfigManager(repo).load_config()


@pytest.fixture
def schema(config: dict) -> DocumentSchema:
    return DocumentSchema.from_config(config)


@pytest.fixture
def validator(config: dict, repo: Path) -> DocumentValidator:
    return DocumentValidator.from_config(config, repo_root=repo)
