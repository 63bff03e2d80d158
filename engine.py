from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from jsonschema import Draft7Validator

from field_validators import Violation
from profiles import CHUNK_ANALYSIS, META_ANALYSIS, ProfileRegistry, default_registry
from scoring import Report, build_report, invalid_json_report


@dataclass(frozen=True)
class EngineConfig:
    """Configuração explícita do motor (nada de estado global)."""
    registry: ProfileRegistry = field(default_factory=default_registry)


def _reject_constant(name: str) -> Any:
    raise ValueError(f"constante não-JSON: {name}")


def decode_candidate(candidate: Any) -> Tuple[bool, Any]:
    """
    Decodifica o candidato.
    Retorna (ok, valor). Strings/bytes passam por JSON estrito; o resto é usado como está.
    """
    if not isinstance(candidate, (str, bytes, bytearray)):
        return True, candidate
    try:
        return True, json.loads(candidate, parse_constant=_reject_constant)
    except (ValueError, RecursionError):
        return False, None


class ScoringEngine:
    """Motor genérico: decodifica, aplica o RuleSet do perfil e monta o Report."""

    def __init__(self, config: Optional[EngineConfig] = None):
        self.config = config or EngineConfig()

    def score(self, candidate: Any, profile: str) -> Report:
        # Perfil inválido é erro do chamador: levanta antes de olhar o candidato.
        p = self.config.registry.get(profile)

        ok, value = decode_candidate(candidate)
        if not ok:
            return invalid_json_report()

        violations = p.rule_set.evaluate(value)
        return build_report(violations, p.rule_set.total_weight, p.success_reason)

    def profiles(self) -> List[str]:
        return self.config.registry.names()


_default_engine = ScoringEngine()


def score_chunk_analysis(candidate: Any) -> Report:
    return _default_engine.score(candidate, CHUNK_ANALYSIS)


def score_meta_analysis(candidate: Any) -> Report:
    return _default_engine.score(candidate, META_ANALYSIS)


def _error_path(err: Any) -> str:
    out = ""
    for part in err.absolute_path:
        out = f"{out}[{part}]" if isinstance(part, int) else (f"{out}.{part}" if out else str(part))
    return out or "$"


def check_format(candidate: Any, schema: Dict[str, Any]) -> Report:
    """
    Checagem 'is-json' com schema: tudo ou nada (score 1 ou 0).
    Lista todos os erros do jsonschema, não só o primeiro.
    """
    ok, value = decode_candidate(candidate)
    if not ok:
        return invalid_json_report()

    errors = sorted(Draft7Validator(schema).iter_errors(value), key=_error_path)
    if not errors:
        return Report(passed=True, score=1.0, reason="Output matches the JSON schema")

    violations = [Violation(path=_error_path(e), message=f"{_error_path(e)}: {e.message}") for e in errors]
    return Report(
        passed=False,
        score=0.0,
        reason="Schema errors: " + "; ".join(v.message for v in violations),
        violations=violations,
    )
