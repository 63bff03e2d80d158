from __future__ import annotations

from typing import Any, Dict, List, Optional


def _rows(data: dict) -> List[dict]:
    return ((data.get("results") or {}).get("results")) or []


def provider_label(row: dict) -> str:
    prov = row.get("provider") or {}
    return prov.get("label") or prov.get("id") or "unknown"


def _components(row: dict) -> List[dict]:
    return ((row.get("gradingResult") or {}).get("componentResults")) or []


def summarize_by_provider(data: dict) -> Dict[str, dict]:
    """Agrupa por provider: pass/fail, scores e motivos das asserções que falharam."""
    out: Dict[str, dict] = {}
    for r in _rows(data):
        s = out.setdefault(provider_label(r), {"pass": 0, "fail": 0, "failures": [], "scores": []})
        if r.get("success"):
            s["pass"] += 1
        else:
            s["fail"] += 1
            reasons = [(c.get("reason") or "")[:200] for c in _components(r) if not c.get("pass")]
            s["failures"].append({"desc": r.get("description") or "", "reasons": reasons})

        score = (r.get("gradingResult") or {}).get("score")
        if score is not None:
            s["scores"].append(score)
    return out


def summarize_by_test(data: dict) -> Dict[str, List[dict]]:
    out: Dict[str, List[dict]] = {}
    for r in _rows(data):
        out.setdefault(r.get("description") or "unnamed", []).append({
            "provider": provider_label(r),
            "pass": bool(r.get("success")),
            "score": (r.get("gradingResult") or {}).get("score"),
        })
    return out


def token_usage(data: dict) -> Optional[dict]:
    return ((data.get("results") or {}).get("stats") or {}).get("tokenUsage")


def _fmt_score(score: Any) -> str:
    return f"{score:.2f}" if isinstance(score, (int, float)) else "N/A"


def render_scorecard(data: dict) -> List[str]:
    """Placar por modelo, quebra por teste e uso de tokens."""
    rows = _rows(data)
    stats = (data.get("results") or {}).get("stats") or {}

    lines = ["=== BLINDSPOT LLM EVALUATION RESULTS ==="]
    lines.append(
        f"Total: {len(rows)} test runs | Passed: {stats.get('successes', 0)} | Failed: {stats.get('failures', 0)}"
    )
    lines.append("")
    lines.append("=== PER-MODEL SCORECARD ===")
    lines.append("")

    for name, s in summarize_by_provider(data).items():
        total = s["pass"] + s["fail"]
        pct = (s["pass"] / total) * 100 if total else 0.0
        avg = _fmt_score(sum(s["scores"]) / len(s["scores"])) if s["scores"] else "N/A"
        tag = "ALL PASS" if s["fail"] == 0 else f"{s['fail']} FAILED"
        lines.append(f"{name}:  {s['pass']}/{total} passed ({pct:.0f}%)  avg score: {avg}  [{tag}]")
        for f in s["failures"]:
            lines.append(f"  FAILED on: {f['desc'][:80]}")
            lines.extend(f"    -> {reason}" for reason in f["reasons"])

    lines.append("")
    lines.append("=== PER-TEST BREAKDOWN ===")
    lines.append("")
    for desc, runs in summarize_by_test(data).items():
        lines.append(f"Test: {desc}")
        for run in runs:
            status = "PASS" if run["pass"] else "FAIL"
            lines.append(f"  {run['provider']}: {status} (score: {_fmt_score(run['score'])})")
        lines.append("")

    lines.append("=== TOKEN USAGE ===")
    tok = token_usage(data)
    if tok:
        lines.append(f"Total: {tok.get('total')} | Prompt: {tok.get('prompt')} | Completion: {tok.get('completion')}")
    return lines


def collect_failures(data: dict, label_substring: str) -> List[dict]:
    return [
        r for r in _rows(data)
        if label_substring in ((r.get("provider") or {}).get("label") or "") and r.get("success") is False
    ]


def render_failures(data: dict, label_substring: str) -> List[str]:
    """Detalha as falhas de um provider: preview da transcrição, saída crua e asserções."""
    fails = collect_failures(data, label_substring)
    lines = [f"Found {len(fails)} {label_substring} failures", ""]

    for f in fails:
        lines.append(f"--- {label_substring.upper()} FAILURE ---")
        transcript = (f.get("vars") or {}).get("transcript") or ""
        lines.append(f"Transcript preview: {transcript[:80]}...")
        lines.append("")

        output = str((f.get("response") or {}).get("output") or "")
        lines.append("Raw output (first 600 chars):")
        lines.append(output[:600])
        lines.append("")

        lines.append("Assertion results:")
        for c in _components(f):
            status = "PASS" if c.get("pass") else "FAIL"
            a_type = (c.get("assertion") or {}).get("type")
            lines.append(f"  {status} [{a_type}]: {(c.get('reason') or '')[:200]}")
        lines.append("")
    return lines
