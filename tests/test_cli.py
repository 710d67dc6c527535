from __future__ import annotations

from pathlib import Path

import orjson
import pytest
from typer.testing import CliRunner

from autofill.cli import app

runner = CliRunner()


@pytest.fixture(autouse=True)
def quiet_logging(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr("autofill.cli.setup_logging", lambda *args, **kwargs: None)


SNAPSHOT = {
    "address": "root",
    "children": [
        {"address": "child0", "idName": "login_user", "kind": "text"},
        {"address": "child1", "idName": "login_pass", "kind": "password"},
    ],
}


def write_snapshot(tmp_path: Path, payload: object) -> Path:
    path = tmp_path / "snapshot.json"
    path.write_bytes(orjson.dumps(payload))
    return path


def test_classify_prints_fill_plan(tmp_path: Path) -> None:
    path = write_snapshot(tmp_path, SNAPSHOT)
    result = runner.invoke(app, ["classify", str(path), "--origin", "com.example.app"])
    assert result.exit_code == 0, result.output
    plan = orjson.loads(result.stdout)
    assert plan["requested_match_key"] == "com.example.app"
    assert plan["form"]["username_field"]["address"] == "child0"
    assert plan["form"]["password_fields"][0]["role"] == "current_password"


def test_classify_save_plan(tmp_path: Path) -> None:
    path = write_snapshot(tmp_path, SNAPSHOT)
    result = runner.invoke(app, ["classify", str(path), "--origin", "com.example.app", "--save"])
    assert result.exit_code == 0, result.output
    plan = orjson.loads(result.stdout)
    assert sorted(plan["addresses_to_reread"]) == ["child0", "child1"]


def test_classify_denylisted_origin(tmp_path: Path) -> None:
    path = write_snapshot(tmp_path, SNAPSHOT)
    result = runner.invoke(app, ["classify", str(path), "--origin", "org.sufficientlysecure.keychain"])
    assert result.exit_code == 0
    assert "No login form found." in result.stdout


def test_classify_denylist_override(tmp_path: Path) -> None:
    path = write_snapshot(tmp_path, SNAPSHOT)
    result = runner.invoke(
        app,
        ["classify", str(path), "--origin", "com.example.app", "--denylist", "com.example.app"],
    )
    assert result.exit_code == 0
    assert "No login form found." in result.stdout


def test_classify_malformed_snapshot(tmp_path: Path) -> None:
    cyclic = {"address": "root", "children": [{"address": "a", "children": [{"address": "root"}]}]}
    path = write_snapshot(tmp_path, cyclic)
    result = runner.invoke(app, ["classify", str(path), "--origin", "com.example.app"])
    assert result.exit_code == 1


def test_classify_unparsable_snapshot(tmp_path: Path) -> None:
    path = tmp_path / "broken.json"
    path.write_text("{not json", encoding="utf-8")
    result = runner.invoke(app, ["classify", str(path), "--origin", "com.example.app"])
    assert result.exit_code == 1


def test_fields_lists_roles(tmp_path: Path) -> None:
    path = write_snapshot(tmp_path, SNAPSHOT)
    result = runner.invoke(app, ["fields", str(path)])
    assert result.exit_code == 0, result.output
    lines = result.stdout.splitlines()
    assert lines[0] == "root: irrelevant (rule 4)"
    assert lines[1] == "  child0: username (rule 3)"
    assert lines[2] == "  child1: current_password (rule 2)"
