"""
CLI: pontuação de lotes, métricas e relatório.
"""
import json

import pytest

import experiment_runner
from experiment_runner import build_report, compute_metrics, load_cases, main, score_cases


def test_load_cases_json_list(tmp_path, chunk):
    path = tmp_path / "cases.json"
    path.write_text(json.dumps([chunk, {"id": "B", "output": "not json"}]), encoding="utf-8")
    cases = load_cases(path)
    assert [c["id"] for c in cases] == ["CASE-000", "B"]
    assert cases[0]["output"] == chunk
    assert cases[1]["output"] == "not json"


def test_load_cases_jsonl_keeps_bad_lines_as_text(tmp_path, chunk):
    path = tmp_path / "cases.jsonl"
    path.write_text(json.dumps({"id": "A", "output": chunk}) + "\n\n{broken\n", encoding="utf-8")
    cases = load_cases(path)
    assert [c["id"] for c in cases] == ["A", "CASE-001"]
    assert cases[1]["output"] == "{broken"


def test_load_cases_from_runner_results(tmp_path, chunk):
    data = {"results": {"results": [
        {"provider": {"label": "Phi"}, "description": "ep", "response": {"output": json.dumps(chunk)}},
    ]}}
    path = tmp_path / "results.json"
    path.write_text(json.dumps(data), encoding="utf-8")
    assert load_cases(path) == [{"id": "ep", "output": json.dumps(chunk), "provider": "Phi"}]


def test_score_cases_and_metrics(engine, chunk):
    broken = dict(chunk, tone="", quotes=[{"startIndex": 1}, {"startIndex": 2}])
    cases = [
        {"id": "ok", "output": chunk},
        {"id": "bad", "output": broken},
        {"id": "junk", "output": "<html>"},
    ]
    rows = score_cases(engine, cases, "chunk-analysis", with_format=True)

    assert [r["report"]["pass"] for r in rows] == [True, False, False]
    assert rows[0]["format"]["pass"] is True
    assert rows[2]["report"]["reason"] == "Output is not valid JSON"

    metrics = compute_metrics(rows)
    assert metrics["total_evaluated"] == 3
    assert metrics["passed"] == 1
    assert metrics["invalid_json"] == 1
    assert metrics["min_score"] == 0.0
    top = dict(metrics["top_violation_paths"])
    assert top["quotes[*].endIndex"] == 2
    assert top["tone"] == 1

    report = build_report("RUN-T", "chunk-analysis", metrics, rows)
    assert "- Profile: **chunk-analysis**" in report
    assert "### bad score=" in report
    assert "### ok" not in report


def test_compute_metrics_empty():
    assert compute_metrics([])["pass_rate"] == 0.0


def test_main_score_writes_outputs(tmp_path, meta, capsys):
    src = tmp_path / "meta.json"
    src.write_text(json.dumps([meta]), encoding="utf-8")
    out_dir = tmp_path / "results"

    code = main(["score", str(src), "--profile", "meta-analysis", "--results-dir", str(out_dir)])

    assert code == 0
    rows = [json.loads(ln) for ln in (out_dir / "results_meta-analysis.jsonl").read_text(encoding="utf-8").splitlines()]
    assert rows[0]["report"]["pass"] is True
    assert list(out_dir.glob("report_*_meta-analysis.md"))
    assert "[SCORE] 1/1 passed" in capsys.readouterr().out


def test_main_score_failures_exit_nonzero(tmp_path):
    src = tmp_path / "c.json"
    src.write_text(json.dumps(["nope"]), encoding="utf-8")
    assert main(["score", str(src), "--profile", "chunk-analysis", "--results-dir", str(tmp_path)]) == 1


def test_main_unknown_profile(tmp_path, capsys):
    src = tmp_path / "c.json"
    src.write_text("[]", encoding="utf-8")
    assert main(["score", str(src), "--profile", "nope", "--results-dir", str(tmp_path)]) == 2
    assert "[FAIL]" in capsys.readouterr().out


def test_main_config_without_database(monkeypatch, tmp_path, capsys):
    monkeypatch.setattr(experiment_runner, "settings", experiment_runner.settings.__class__(database_url=None))
    assert main(["config", "--out", str(tmp_path / "cfg.json")]) == 1
    assert "[DB_FETCH_FAILED]" in capsys.readouterr().out
    assert not (tmp_path / "cfg.json").exists()


def test_main_analyze(tmp_path, capsys):
    path = tmp_path / "results.json"
    path.write_text(json.dumps({"results": {"stats": {}, "results": []}}), encoding="utf-8")
    assert main(["analyze", str(path)]) == 0
    assert "=== PER-MODEL SCORECARD ===" in capsys.readouterr().out


def test_subcommand_required():
    with pytest.raises(SystemExit):
        main([])
