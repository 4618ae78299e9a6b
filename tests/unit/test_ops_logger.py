import json

from leads.ops_logger import OpsLogger, log_error


def test_event_writes_jsonl(tmp_path):
    path = tmp_path / "logs" / "ops.log"
    ops = OpsLogger(path)
    ops.event("page_extracted", source_url="https://a.com", people=2)
    ops.event("summary", accepted=1)

    records = [json.loads(line) for line in path.read_text(encoding="utf-8").splitlines()]
    assert [r["event"] for r in records] == ["page_extracted", "summary"]
    assert records[0]["dml_ops"] == 1
    assert records[0]["people"] == 2
    assert "ts" in records[0]


def test_stdout_mirror_and_unserializable_values(capsys):
    ops = OpsLogger(None, also_stdout=True)
    ops.event("summary", obj=object())
    out = capsys.readouterr().out
    assert '"event": "summary"' in out


def test_log_error_prints_and_emits(tmp_path, capsys):
    path = tmp_path / "ops.log"
    log_error(OpsLogger(path), "fetch failed", ValueError("bad"), event="fetch_error", url="https://a.com")

    err = capsys.readouterr().err
    assert "fetch failed: ValueError: bad @ https://a.com" in err
    record = json.loads(path.read_text(encoding="utf-8"))
    assert record["event"] == "fetch_error"
    assert record["error"] == "ValueError: bad"

    log_error(None, "no ops", RuntimeError("x"))
    assert "no ops: RuntimeError: x" in capsys.readouterr().err
