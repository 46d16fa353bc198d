from __future__ import annotations

import json
from pathlib import Path

import pytest

from helpers.documents import rule_document
from helpers.io_utils import write_project_config, write_yaml
from rulebook import __version__
from rulebook.cli._dispatcher import main


def _run(repo: Path, *argv: str) -> int:
    return main([*argv, "--repo-root", str(repo)])


def _write_rule(repo: Path, name: str, text: str) -> Path:
    path = repo / "rules" / name
    path.write_text(text, encoding="utf-8")
    return path


def test_version(capsys: pytest.CaptureFixture[str]) -> None:
    with pytest.raises(SystemExit) as excinfo:
        main(["--version"])
    assert excinfo.value.code == 0
    assert __version__ in capsys.readouterr().out


def test_no_domain_prints_help(capsys: pytest.CaptureFixture[str]) -> None:
    assert main([]) == 0
    assert "rules" in capsys.readouterr().out


def test_rules_check_passes_for_valid_documents(repo: Path, capsys: pytest.CaptureFixture[str]) -> None:
    _write_rule(repo, "rest.md", rule_document())

    rc = _run(repo, "rules", "check")

    out = capsys.readouterr().out
    assert rc == 0
    assert "rules/rest.md: ok" in out
    assert "1 document(s) checked, 0 failed" in out


def test_rules_check_reports_findings(repo: Path, capsys: pytest.CaptureFixture[str]) -> None:
    path = _write_rule(
        repo,
        "rest.md",
        rule_document(
            rules={"Must Have": ["- **RULE-001**: One", "- **RULE-001**: Two"]},
            omit=["Quality Gates"],
        ),
    )

    rc = _run(repo, "rules", "check", str(path))

    out = capsys.readouterr().out
    assert rc == 1
    assert "error [duplicate-rule-id]" in out
    assert "error [missing-section] Missing required section 'Quality Gates'" in out
    assert "FAILED" in out


def test_rules_check_json(repo: Path, capsys: pytest.CaptureFixture[str]) -> None:
    _write_rule(repo, "good.md", rule_document())
    _write_rule(repo, "bad.md", rule_document(omit=["Context"]))

    rc = _run(repo, "rules", "check", "--json")

    payload = json.loads(capsys.readouterr().out)
    assert rc == 1
    assert payload["checked"] == 2
    assert payload["failed"] == 1
    bad = next(d for d in payload["documents"] if d["path"].endswith("bad.md"))
    assert bad["findings"][0]["code"] == "missing-section"


def test_rules_check_strict_fails_on_warning(repo: Path, capsys: pytest.CaptureFixture[str]) -> None:
    _write_rule(repo, "loose.md", rule_document(rules={None: ["- **RULE-001**: Loose"]}))

    assert _run(repo, "rules", "check") == 0
    assert _run(repo, "rules", "check", "--strict") == 1
    assert "warning [untiered-rule]" in capsys.readouterr().out


def test_rules_check_missing_path(repo: Path, capsys: pytest.CaptureFixture[str]) -> None:
    rc = _run(repo, "rules", "check", str(repo / "nope.md"))
    assert rc == 1
    assert "Path not found" in capsys.readouterr().err


def test_rules_check_honours_env_strict(
    repo: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    _write_rule(repo, "loose.md", rule_document(rules={None: ["- **RULE-001**: Loose"]}))
    monkeypatch.setenv("RULEBOOK_VALIDATION__STRICT", "true")
    assert _run(repo, "rules", "check") == 1


def test_invalid_project_config_is_an_error(repo: Path, capsys: pytest.CaptureFixture[str]) -> None:
    write_project_config(repo, "bad", {"validation": {"strict": "sometimes"}})
    rc = _run(repo, "rules", "check")
    err = capsys.readouterr().err
    assert rc == 1
    assert err.startswith("Error: Schema validation failed")


def test_rules_list(repo: Path, capsys: pytest.CaptureFixture[str]) -> None:
    _write_rule(repo, "rest.md", rule_document())

    rc = _run(repo, "rules", "list", "--json")

    payload = json.loads(capsys.readouterr().out)
    assert rc == 0
    assert payload["count"] == 1
    doc = payload["documents"][0]
    assert doc["title"] == "REST API Design Rules"
    assert doc["rules"] == {"must": 2, "should": 1, "could": 1}


def test_rules_show(repo: Path, capsys: pytest.CaptureFixture[str]) -> None:
    path = _write_rule(repo, "rest.md", rule_document())

    rc = _run(repo, "rules", "show", str(path))

    out = capsys.readouterr().out
    assert rc == 0
    assert out.startswith("# REST API Design Rules")
    assert "RULE-101 [Should Have] Support cursor pagination on list endpoints" in out


def test_rules_show_unreadable(repo: Path, capsys: pytest.CaptureFixture[str]) -> None:
    rc = _run(repo, "rules", "show", str(repo / "rules" / "missing.md"), "--json")
    err = json.loads(capsys.readouterr().err)
    assert rc == 1
    assert err["code"] == "DocumentParseError"


def test_rules_audit(repo: Path, capsys: pytest.CaptureFixture[str]) -> None:
    text = rule_document()
    _write_rule(repo, "rest.md", text)
    _write_rule(repo, "rest-copy.md", text.replace("REST API Design Rules", "REST copy"))

    rc = _run(repo, "rules", "audit", "--json")

    payload = json.loads(capsys.readouterr().out)
    assert rc == 0
    assert payload["documents"] == 2
    assert len(payload["pairs"]) == 1
    assert payload["pairs"][0]["similarity"] == 1.0


def test_rules_audit_rejects_bad_threshold(repo: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert _run(repo, "rules", "audit", "--min-similarity", "1.5") == 1
    assert "between 0 and 1" in capsys.readouterr().err


def test_template_list(repo: Path, capsys: pytest.CaptureFixture[str]) -> None:
    rc = _run(repo, "template", "list", "--placeholders")
    out = capsys.readouterr().out
    assert rc == 0
    assert "rule-document  [bundled]  kind: rule" in out
    assert "placeholders: " in out


def test_template_render_to_stdout_then_check(repo: Path, capsys: pytest.CaptureFixture[str]) -> None:
    values = write_yaml(
        repo / "values.yaml",
        {
            "title": "Queue Rules",
            "applies_to": "Message consumers",
            "principles": ["At-least-once delivery"],
            "rules": {"must": ["Make handlers idempotent"], "should": ["Use dead-letter queues"]},
            "patterns": {"good": "ack()", "bad": "auto_ack=True"},
            "decision_framework": ["Can the handler run twice?"],
            "quality_gates": ["Replay test passes"],
            "tldr": "Idempotent handlers.",
        },
    )

    rc = _run(repo, "template", "render", "rule-document", "--values", str(values), "--check")

    out = capsys.readouterr().out
    assert rc == 0
    assert out.startswith("# Queue Rules\n")
    assert "- **RULE-101**: Use dead-letter queues" in out


def test_template_render_reports_every_missing_value(
    repo: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    rc = _run(repo, "template", "render", "feature-spec", "--set", "title=Export")

    captured = capsys.readouterr()
    assert rc == 1
    assert "Missing value(s) for template feature-spec" in captured.err
    for name in ("acceptance_criteria", "overview", "requirements", "user_stories"):
        assert f"missing: {name}" in captured.out


def test_template_render_writes_default_output(repo: Path, capsys: pytest.CaptureFixture[str]) -> None:
    args = [
        "template", "render", "feature-spec",
        "--set", "title=PDF Export",
        "--set", "overview=Export rules as PDF",
        "--set", "user_stories=[As a lead I want PDFs]",
        "--set", "requirements=[One document]",
        "--set", "acceptance_criteria=[PDF has every rule]",
    ]

    assert _run(repo, *args, "--output", "--dry-run") == 0
    assert not (repo / "specs" / "pdf-export.md").exists()
    assert "Would write" in capsys.readouterr().out

    assert _run(repo, *args, "--output") == 0
    target = repo / "specs" / "pdf-export.md"
    assert target.read_text(encoding="utf-8").startswith("# PDF Export")

    assert _run(repo, *args, "--output") == 1
    assert "already exists" in capsys.readouterr().err
    assert _run(repo, *args, "--output", "--force") == 0


def test_template_render_unknown_template(repo: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert _run(repo, "template", "render", "runbook") == 1
    assert "Template not found: runbook" in capsys.readouterr().err


def test_config_show_key(repo: Path, capsys: pytest.CaptureFixture[str]) -> None:
    rc = _run(repo, "config", "show", "audit.min_similarity", "--json")
    assert rc == 0
    assert json.loads(capsys.readouterr().out) == {"audit": {"min_similarity": 0.8}}


def test_config_show_yaml(repo: Path, capsys: pytest.CaptureFixture[str]) -> None:
    write_project_config(repo, "paths", {"paths": {"rules_dir": "guides"}})
    assert _run(repo, "config", "show", "paths") == 0
    assert "rules_dir: guides" in capsys.readouterr().out


def test_config_show_unknown_key(repo: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert _run(repo, "config", "show", "nope.nothing") == 1
    assert "Key not found" in capsys.readouterr().err


def test_logging_file_from_config(repo: Path, capsys: pytest.CaptureFixture[str]) -> None:
    write_project_config(repo, "logging", {"logging": {"level": "INFO", "file": "logs/rulebook.log"}})
    _write_rule(repo, "rest.md", rule_document())

    assert _run(repo, "rules", "check") == 0

    log_text = (repo / "logs" / "rulebook.log").read_text(encoding="utf-8")
    assert "Validated" in log_text


def test_rules_check_reports_every_file_when_one_cannot_be_parsed(
    repo: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    _write_rule(repo, "a.md", rule_document())
    _write_rule(repo, "b.md", "---\nkind: [unclosed\n---\n" + rule_document())
    _write_rule(repo, "c.md", rule_document(omit=["Quality Gates"]))

    rc = _run(repo, "rules", "check")

    out = capsys.readouterr().out
    assert rc == 1
    assert "rules/a.md: ok" in out
    assert "rules/b.md: FAILED (could not be checked:" in out
    assert "Missing required section 'Quality Gates'" in out
    assert "3 document(s) checked, 2 failed" in out

    assert _run(repo, "rules", "check", "--json") == 1
    payload = json.loads(capsys.readouterr().out)
    errors = {Path(d["path"]).name: d["error"] for d in payload["documents"]}
    assert errors["a.md"] is None
    assert "Invalid YAML" in errors["b.md"]
    assert errors["c.md"] is None
