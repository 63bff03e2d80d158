from __future__ import annotations

import argparse
import json
import re
import sys
from collections import Counter
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, List, Optional

from tqdm import tqdm

from config import settings
from engine import EngineConfig, ScoringEngine, check_format
from eval_config import build_eval_config, write_eval_config
from fixtures import extract_test_data, fetch_latest_episode
from results_analysis import provider_label, render_failures, render_scorecard
from schemas import OUTPUT_SCHEMAS
from scoring import INVALID_JSON_REASON

_INDEX_RE = re.compile(r"\[\d+\]")


def now_utc_iso() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def ensure_dir(path: Path) -> None:
    path.mkdir(parents=True, exist_ok=True)


def load_json(path: Path) -> Any:
    with path.open("r", encoding="utf-8") as f:
        return json.load(f)


def write_jsonl(path: Path, rows: List[dict]) -> None:
    with path.open("w", encoding="utf-8") as f:
        for r in rows:
            f.write(json.dumps(r, ensure_ascii=False) + "\n")


def _as_case(i: int, item: Any) -> dict:
    if isinstance(item, dict) and "output" in item:
        return {"id": str(item.get("id", f"CASE-{i:03d}")), "output": item["output"],
                "provider": item.get("provider")}
    return {"id": f"CASE-{i:03d}", "output": item, "provider": None}


def load_cases(path: Path) -> List[dict]:
    """
    Carrega candidatos de:
      - .jsonl: uma linha por caso ({"id", "output"} ou o candidato cru; linha inválida vira texto)
      - .json com lista de casos
      - results.json do runner externo (usa response.output de cada execução)
    """
    if path.suffix == ".jsonl":
        cases = []
        lines = [ln for ln in path.read_text(encoding="utf-8").splitlines() if ln.strip()]
        for i, line in enumerate(lines):
            try:
                item = json.loads(line)
            except ValueError:
                item = line
            cases.append(_as_case(i, item))
        return cases

    data = load_json(path)
    if isinstance(data, dict) and "results" in data:
        rows = (data.get("results") or {}).get("results") or []
        return [
            {
                "id": r.get("description") or f"CASE-{i:03d}",
                "output": (r.get("response") or {}).get("output", ""),
                "provider": provider_label(r),
            }
            for i, r in enumerate(rows)
        ]
    if isinstance(data, list):
        return [_as_case(i, item) for i, item in enumerate(data)]
    return [_as_case(0, data)]


def compute_metrics(rows: List[dict]) -> dict:
    """Métricas agregadas do lote (pass rate, score médio, paths que mais falham)."""
    total = len(rows)
    passed = sum(1 for r in rows if r["report"]["pass"])
    invalid = sum(1 for r in rows if r["report"]["reason"] == INVALID_JSON_REASON)
    scores = [float(r["report"]["score"]) for r in rows]

    paths: Counter = Counter()
    for r in rows:
        for v in r.get("violations", []):
            paths[_INDEX_RE.sub("[*]", v["path"])] += 1

    return {
        "total_evaluated": total,
        "passed": passed,
        "failed": total - passed,
        "pass_rate": passed / total if total else 0.0,
        "avg_score": sum(scores) / total if total else 0.0,
        "min_score": min(scores) if scores else 0.0,
        "invalid_json": invalid,
        "top_violation_paths": paths.most_common(10),
    }


def build_report(run_id: str, profile: str, metrics: dict, rows: List[dict]) -> str:
    """Gera relatório em Markdown."""
    lines = []
    lines.append(f"# Relatório — {run_id}")
    lines.append("")
    lines.append(f"- Profile: **{profile}**")
    lines.append(f"- Timestamp (UTC): {now_utc_iso()}")
    lines.append("")

    lines.append("## Métricas")
    lines.append("```json")
    lines.append(json.dumps(metrics, indent=2, ensure_ascii=False))
    lines.append("```")
    lines.append("")

    lines.append("## Falhas (amostra)")
    failures = [r for r in rows if not r["report"]["pass"]]
    if failures:
        for f in failures[:10]:
            title = f["case_id"] + (f" ({f['provider']})" if f.get("provider") else "")
            lines.append(f"### {title} score={f['report']['score']:.2f}")
            lines.append(f"- reason: {f['report']['reason']}")
            if "format" in f:
                lines.append(f"- format: {f['format']['reason']}")
            lines.append("")
    else:
        lines.append("Nenhuma falha detectada.")
        lines.append("")
    return "\n".join(lines)


def score_cases(engine: ScoringEngine, cases: List[dict], profile: str, with_format: bool = False) -> List[dict]:
    schema = OUTPUT_SCHEMAS.get(profile) if with_format else None
    rows: List[dict] = []
    for case in tqdm(cases, desc=f"Scoring {profile}"):
        report = engine.score(case["output"], profile)
        row = {
            "run_id": settings.run_id,
            "profile": profile,
            "case_id": case["id"],
            "provider": case.get("provider"),
            "report": report.to_dict(),
            "violations": [{"path": v.path, "message": v.message} for v in report.violations],
            "timestamp_utc": now_utc_iso(),
        }
        if schema is not None:
            row["format"] = check_format(case["output"], schema).to_dict()
        rows.append(row)
    return rows


def cmd_score(args: argparse.Namespace) -> int:
    engine = ScoringEngine(EngineConfig())
    profile = args.profile or settings.eval_profile
    if profile not in engine.profiles():
        print(f"[FAIL] perfil desconhecido: {profile} (disponíveis: {', '.join(engine.profiles())})")
        return 2

    results_dir = Path(args.results_dir or settings.results_dir)
    ensure_dir(results_dir)

    rows = score_cases(engine, load_cases(Path(args.input)), profile, with_format=args.with_format)
    metrics = compute_metrics(rows)

    out_path = results_dir / f"results_{profile}.jsonl"
    write_jsonl(out_path, rows)
    report_path = results_dir / f"report_{settings.run_id}_{profile}.md"
    report_path.write_text(build_report(settings.run_id, profile, metrics, rows), encoding="utf-8")

    print(f"[SCORE] {metrics['passed']}/{metrics['total_evaluated']} passed, avg score {metrics['avg_score']:.2f}")
    print(f"[OK] wrote {len(rows)} -> {out_path}")
    print(f"[OK] wrote report -> {report_path}")
    return 0 if metrics["failed"] == 0 else 1


def cmd_config(args: argparse.Namespace) -> int:
    try:
        episode = fetch_latest_episode(settings.database_url)
    except Exception as e:
        print(f"[DB_FETCH_FAILED] Failed to fetch latest episode from database: {type(e).__name__}: {e}")
        return 1

    print(f"[FETCH] Loaded test case: {episode.description}")
    path = write_eval_config(build_eval_config(episode, settings), Path(args.out))
    print(f"[OK] wrote config -> {path}")
    return 0


def cmd_extract(args: argparse.Namespace) -> int:
    try:
        written = extract_test_data(
            settings.database_url,
            Path(args.out or settings.test_cases_dir),
            chunk_size_chars=settings.chunk_size_chars,
            limit=settings.fixture_limit,
        )
    except Exception as e:
        print(f"[DB_FETCH_FAILED] {type(e).__name__}: {e}")
        return 1
    print(f"[OK] wrote {len(written)} fixture files")
    return 0


def cmd_analyze(args: argparse.Namespace) -> int:
    for line in render_scorecard(load_json(Path(args.input))):
        print(line)
    return 0


def cmd_debug(args: argparse.Namespace) -> int:
    for line in render_failures(load_json(Path(args.input)), args.provider):
        print(line)
    return 0


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(description="Blindspot LLM output-quality scoring harness")
    sub = ap.add_subparsers(dest="command", required=True)

    p = sub.add_parser("score", help="Pontua candidatos (JSON/JSONL/results.json) contra um perfil.")
    p.add_argument("input")
    p.add_argument("--profile", default=None, help="chunk-analysis | meta-analysis (default: EVAL_PROFILE)")
    p.add_argument("--results-dir", default=None)
    p.add_argument("--with-format", action="store_true", help="Também valida contra o JSON schema do perfil.")
    p.set_defaults(func=cmd_score)

    p = sub.add_parser("config", help="Busca o episódio mais recente e gera a config do runner.")
    p.add_argument("--out", default="promptfooconfig.json")
    p.set_defaults(func=cmd_config)

    p = sub.add_parser("extract", help="Extrai transcrições e meta esperado do banco.")
    p.add_argument("--out", default=None)
    p.set_defaults(func=cmd_extract)

    p = sub.add_parser("analyze", help="Placar por modelo a partir do results.json.")
    p.add_argument("input", nargs="?", default="output/results.json")
    p.set_defaults(func=cmd_analyze)

    p = sub.add_parser("debug", help="Detalha as falhas de um provider.")
    p.add_argument("input", nargs="?", default="output/results.json")
    p.add_argument("--provider", default="Gemma3")
    p.set_defaults(func=cmd_debug)
    return ap


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
