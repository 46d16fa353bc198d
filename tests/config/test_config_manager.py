from __future__ import annotations

from pathlib import Path

import pytest

from helpers.io_utils import write_project_config
from rulebook.core.config import ConfigManager, get_nested
from rulebook.core.exceptions import ConfigError, SchemaValidationError
from rulebook.core.schema import DocumentSchema
from rulebook.core.schema.validation import load_schema
from rulebook.core.utils.merge import deep_merge, merge_arrays
from rulebook.core.utils.paths import PROJECT_ROOT_ENV, resolve_project_root


def test_bundled_defaults_load_and_validate(repo: Path) -> None:
    cfg = ConfigManager(repo).load_config()

    assert cfg["paths"]["rules_dir"] == "rules"
    assert cfg["rule_ids"]["tiers"]["should"]["min"] == 101
    assert set(cfg["documents"]) == {"rule", "feature-spec"}
    assert cfg["audit"] == {"shingle_size": 12, "min_similarity": 0.8}


def test_load_config_validates_by_default() -> None:
    assert ConfigManager.load_config.__defaults__ == (True,)
    assert load_schema("config")["$schema"].endswith("2020-12/schema")


def test_project_config_overrides_bundled(repo: Path) -> None:
    write_project_config(repo, "paths", {"paths": {"rules_dir": "docs/rules"}})
    write_project_config(
        repo,
        "tiers",
        {"rule_ids": {"tiers": {"must": {"keywords": ["+", "blocking"]}}}},
    )

    cfg = ConfigManager(repo).load_config()

    assert cfg["paths"]["rules_dir"] == "docs/rules"
    assert cfg["paths"]["templates_dir"] == "templates"
    assert cfg["rule_ids"]["tiers"]["must"]["keywords"][-1] == "blocking"
    assert "must" in cfg["rule_ids"]["tiers"]["must"]["keywords"]


def test_project_can_add_document_kind(repo: Path) -> None:
    write_project_config(
        repo,
        "kinds",
        {
            "documents": {
                "runbook": {
                    "rule_ids": False,
                    "sections": [
                        {"name": "Symptoms", "required": True},
                        {"name": "Steps", "required": True, "aliases": ["Procedure"]},
                    ],
                }
            }
        },
    )
    schema = DocumentSchema.from_config(ConfigManager(repo).load_config())
    runbook = schema.get_kind("runbook")
    assert [s.name for s in runbook.required_sections] == ["Symptoms", "Steps"]
    assert runbook.match_section("2. Procedure").name == "Steps"


def test_env_overrides_are_typed(repo: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("RULEBOOK_VALIDATION__STRICT", "true")
    monkeypatch.setenv("RULEBOOK_AUDIT__SHINGLE_SIZE", "8")
    monkeypatch.setenv("RULEBOOK_AUDIT__MIN_SIMILARITY", "0.5")
    monkeypatch.setenv("RULEBOOK_PATHS__RULES_DIR", "guides")

    cfg = ConfigManager(repo).load_config()

    assert cfg["validation"]["strict"] is True
    assert cfg["audit"]["shingle_size"] == 8
    assert cfg["audit"]["min_similarity"] == 0.5
    assert cfg["paths"]["rules_dir"] == "guides"


def test_env_overrides_win_over_project_config(repo: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    write_project_config(repo, "validation", {"validation": {"check_order": False}})
    monkeypatch.setenv("RULEBOOK_VALIDATION__CHECK_ORDER", "true")
    assert ConfigManager(repo).load_config()["validation"]["check_order"] is True


def test_env_append_to_list(repo: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("RULEBOOK_RULE_IDS__TIERS__COULD__KEYWORDS__APPEND", "someday")
    cfg = ConfigManager(repo).load_config()
    assert cfg["rule_ids"]["tiers"]["could"]["keywords"][-1] == "someday"


def test_project_root_env_is_not_an_override(repo: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv(PROJECT_ROOT_ENV, str(repo))
    cfg = ConfigManager(repo).load_config()
    assert "project_root" not in cfg


def test_malformed_env_key_raises(repo: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("RULEBOOK_AUDIT____SHINGLE_SIZE", "3")
    with pytest.raises(ConfigError, match="empty segment"):
        ConfigManager(repo).load_config()


def test_schema_errors_are_collected(repo: Path) -> None:
    write_project_config(
        repo,
        "bad",
        {"audit": {"min_similarity": 2}, "logging": {"level": "LOUD"}},
    )
    with pytest.raises(SchemaValidationError) as excinfo:
        ConfigManager(repo).load_config()

    errors = excinfo.value.context["errors"]
    assert len(errors) == 2
    assert any(e.startswith("audit.min_similarity") for e in errors)
    assert any(e.startswith("logging.level") for e in errors)


def test_invalid_yaml_raises_config_error(repo: Path) -> None:
    (repo / ".rulebook" / "config" / "broken.yaml").write_text("paths: [unclosed\n", encoding="utf-8")
    with pytest.raises(ConfigError, match="Invalid YAML"):
        ConfigManager(repo).load_config()


def test_invalid_rule_id_pattern_raises(repo: Path) -> None:
    write_project_config(repo, "ids", {"rule_ids": {"pattern": "RULE-(\\d{3}"}})
    with pytest.raises(ConfigError, match="Invalid rule_ids.pattern"):
        DocumentSchema.from_config(ConfigManager(repo).load_config())


def test_get_nested(repo: Path) -> None:
    mgr = ConfigManager(repo)
    assert mgr.get("validation.check_order") is True
    assert get_nested({"a": {"b": 1}}, "a.c", "fallback") == "fallback"


def test_merge_arrays_semantics() -> None:
    assert merge_arrays([1, 2], [3]) == [3]
    assert merge_arrays([1, 2], ["+", 3]) == [1, 2, 3]
    assert merge_arrays([1, 2], ["=", 3]) == [3]
    assert merge_arrays([1, 2], []) == []
    assert deep_merge({"a": {"b": 1}}, {"a": {"c": 2}}) == {"a": {"b": 1, "c": 2}}


def test_resolve_project_root_prefers_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv(PROJECT_ROOT_ENV, str(tmp_path))
    assert resolve_project_root() == tmp_path.resolve()


def test_resolve_project_root_walks_up_to_marker(tmp_path: Path) -> None:
    (tmp_path / ".rulebook").mkdir()
    nested = tmp_path / "rules" / "api"
    nested.mkdir(parents=True)
    assert resolve_project_root(nested) == tmp_path.resolve()


def test_resolve_project_root_rejects_config_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    (tmp_path / ".rulebook").mkdir()
    monkeypatch.setenv(PROJECT_ROOT_ENV, str(tmp_path / ".rulebook"))
    with pytest.raises(ConfigError, match="must point to the project root"):
        resolve_project_root()


def test_resolve_project_root_missing_env_path(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv(PROJECT_ROOT_ENV, str(tmp_path / "gone"))
    with pytest.raises(ConfigError, match="missing path"):
        resolve_project_root()
