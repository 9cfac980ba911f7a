import json
from pathlib import Path

from typer.testing import CliRunner

from wirespec.cli import app

runner = CliRunner()

ENDPOINT = {
    "metadata": {"method": "POST", "name": "send_message", "path": "/rooms/:room_id/send"},
    "request": [
        {"name": "room_id", "attrs": ["path"]},
        {"name": "txn", "attrs": ["query"]},
        {"name": "body"},
    ],
    "response": [{"name": "event_id"}],
}


def write(p: Path, data) -> Path:
    p.write_text(json.dumps(data), encoding="utf-8")
    return p


def test_check_ok(tmp_path: Path):
    write(tmp_path / "send.endpoint.json", ENDPOINT)
    result = runner.invoke(app, ["check", str(tmp_path)])
    assert result.exit_code == 0, result.output
    assert "send_message" in result.output


def test_check_reports_issues_and_fails(tmp_path: Path):
    bad = dict(ENDPOINT, metadata=dict(ENDPOINT["metadata"], method="GET"))
    write(tmp_path / "send.endpoint.json", bad)
    result = runner.invoke(app, ["check", str(tmp_path)])
    assert result.exit_code == 1
    assert "body-fields-on-get" in result.output


def test_describe_json(tmp_path: Path):
    f = write(tmp_path / "send.endpoint.json", ENDPOINT)
    result = runner.invoke(app, ["describe", str(f), "--format", "json"])
    assert result.exit_code == 0, result.output
    info = json.loads(result.output)
    assert info["name"] == "send_message"
    assert info["request"]["body_mode"] == "aggregate"


def test_encode_request(tmp_path: Path):
    f = write(tmp_path / "send.endpoint.json", ENDPOINT)
    values = json.dumps({"room_id": "!r:hs", "txn": "1", "body": "hello"})
    result = runner.invoke(app, ["encode-request", str(f), "--values", values])
    assert result.exit_code == 0, result.output

    raw = json.loads(result.output)
    assert raw["method"] == "POST"
    assert raw["path"] == "/rooms/%21r%3Ahs/send"
    assert raw["query"] == "txn=1"
    assert raw["headers"] == {"Content-Type": "application/json"}
    assert json.loads(raw["body"]) == {"body": "hello"}
