from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Sequence

from field_validators import Violation

INVALID_JSON_REASON = "Output is not valid JSON"
FAILURE_PREFIX = "Failed checks: "


@dataclass
class Report:
    """Resultado por candidato: pass/score/reason (+ violações para quem precisar)."""
    passed: bool
    score: float
    reason: str
    violations: List[Violation] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Formato consumido pelo runner de avaliação."""
        return {"pass": self.passed, "score": self.score, "reason": self.reason}


def compute_score(violation_count: int, total_weight: int) -> float:
    """score = max(0, 1 - falhas/peso). Cada violação conta, o peso é fixo."""
    return max(0.0, 1.0 - violation_count / total_weight)


def build_report(violations: Sequence[Violation], total_weight: int, success_reason: str) -> Report:
    violations = list(violations)
    if not violations:
        return Report(passed=True, score=1.0, reason=success_reason, violations=[])
    return Report(
        passed=False,
        score=compute_score(len(violations), total_weight),
        reason=FAILURE_PREFIX + "; ".join(v.message for v in violations),
        violations=violations,
    )


def invalid_json_report() -> Report:
    """Falha estrutural: terminal, sem crédito parcial."""
    return Report(passed=False, score=0.0, reason=INVALID_JSON_REASON, violations=[])
