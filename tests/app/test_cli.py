from __future__ import annotations

import json
from pathlib import Path

import pytest

from graphnorm.config import NormalizerConfig
from graphnorm.ui import cli as cli_module

DATA_DIR = Path(__file__).resolve().parents[1] / "data"
QUERY_PATH = DATA_DIR / "user_friends_ast.json"
PAYLOAD_PATH = DATA_DIR / "user_friends_payload.json"


@pytest.fixture(autouse=True)
def reset_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("GRAPHNORM_TREAT_MISSING_FIELDS_AS_NULL", raising=False)
    monkeypatch.delenv("GRAPHNORM_DEV", raising=False)
    monkeypatch.delenv("GRAPHNORM_LOG_LEVEL", raising=False)


def _args(*extra: str) -> list[str]:
    return ["normalize", "--query", str(QUERY_PATH), "--payload", str(PAYLOAD_PATH), *extra]


def test_cli_prints_normalized_records(capsys: pytest.CaptureFixture[str]) -> None:
    cli_module.main(_args("--variables", '{"id": "4"}'))

    document = json.loads(capsys.readouterr().out)
    assert document["records"]["pet"]["name"] == "Beast"
    assert [payload["handle"] for payload in document["fieldPayloads"]] == [
        "friendsName",
        "bestFriends",
    ]
    assert document["matchPayloads"] == []
    assert document["incrementalPlaceholders"] == []


def test_cli_forwards_flags(monkeypatch: pytest.MonkeyPatch) -> None:
    captured: dict[str, object] = {}

    class FakeReport:
        def to_json(self) -> dict[str, object]:
            return {}

    def fake_normalize(**kwargs: object) -> FakeReport:
        captured.update(kwargs)
        return FakeReport()

    monkeypatch.setattr(cli_module, "normalize_documents", fake_normalize)

    cli_module.main(
        _args(
            "--variables",
            '{"id": "4", "size": [64]}',
            "--parent-path",
            "abc.0.xyz",
            "--treat-missing-as-null",
            "--dev",
            "--persist",
            "--database-uri",
            "sqlite+pysqlite:///:memory:",
        )
    )

    assert captured["query_path"] == QUERY_PATH
    assert captured["variables"] == {"id": "4", "size": [64]}
    assert captured["parent_path"] == ("abc", "0", "xyz")
    assert captured["config"] == NormalizerConfig(
        treat_missing_fields_as_null=True, development=True
    )
    assert captured["persist"] is True
    assert captured["database_uri"] == "sqlite+pysqlite:///:memory:"


def test_cli_reads_config_from_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    captured: dict[str, object] = {}

    class FakeReport:
        def to_json(self) -> dict[str, object]:
            return {}

    def fake_normalize(**kwargs: object) -> FakeReport:
        captured.update(kwargs)
        return FakeReport()

    monkeypatch.setattr(cli_module, "normalize_documents", fake_normalize)
    monkeypatch.setenv("GRAPHNORM_TREAT_MISSING_FIELDS_AS_NULL", "yes")

    cli_module.main(_args())

    assert captured["config"] == NormalizerConfig(treat_missing_fields_as_null=True)
    assert captured["parent_path"] == ()
    assert captured["variables"] == {}


@pytest.mark.parametrize("variables", ["not json", "[1, 2]"])
def test_cli_invalid_variables(variables: str) -> None:
    with pytest.raises(SystemExit) as excinfo:
        cli_module.main(_args("--variables", variables))

    assert excinfo.value.code == 2


def test_cli_invalid_environment_flag(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("GRAPHNORM_DEV", "sometimes")

    with pytest.raises(SystemExit) as excinfo:
        cli_module.main(_args())

    assert excinfo.value.code == 2


def test_cli_invalid_query_document(tmp_path: Path) -> None:
    query_path = tmp_path / "query.json"
    query_path.write_text(json.dumps({"kind": "Operation"}), encoding="utf-8")

    with pytest.raises(SystemExit) as excinfo:
        cli_module.main(["normalize", "--query", str(query_path), "--payload", str(PAYLOAD_PATH)])

    assert excinfo.value.code == 2


def test_cli_normalization_failure(tmp_path: Path) -> None:
    payload_path = tmp_path / "payload.json"
    payload_path.write_text(
        json.dumps({"node": {"id": "4", "__typename": "User", "friends": []}}),
        encoding="utf-8",
    )

    with pytest.raises(SystemExit) as excinfo:
        cli_module.main(["normalize", "--query", str(QUERY_PATH), "--payload", str(payload_path)])

    assert excinfo.value.code == 1


def test_cli_requires_a_command() -> None:
    with pytest.raises(SystemExit) as excinfo:
        cli_module.main([])

    assert excinfo.value.code == 2


def test_cli_invalid_log_level(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("GRAPHNORM_LOG_LEVEL", "chatty")

    with pytest.raises(SystemExit) as excinfo:
        cli_module.main(_args())

    assert excinfo.value.code == 2
