from __future__ import annotations

from dataclasses import dataclass
from typing import Any, List, Tuple

from field_validators import FieldValidator, Violation, join_path, resolve_path


@dataclass(frozen=True)
class Rule:
    """Liga um FieldValidator a um path (relativo ao objeto onde é aplicado)."""
    path: str
    validator: FieldValidator

    def apply(self, obj: Any, prefix: str = "") -> List[Violation]:
        value = resolve_path(obj, self.path)
        return self.validator.check(value, join_path(prefix, self.path))


@dataclass(frozen=True)
class RuleSet:
    """
    Conjunto ordenado de regras + peso fixo do perfil.

    total_weight é o número de dimensões semânticas do perfil, não o número
    de violações possíveis; é o denominador do score.
    """
    rules: Tuple[Rule, ...]
    total_weight: int

    def __post_init__(self) -> None:
        if self.total_weight <= 0:
            raise ValueError(f"total_weight deve ser > 0 (recebido: {self.total_weight})")
        object.__setattr__(self, "rules", tuple(self.rules))

    def evaluate(self, candidate: Any) -> List[Violation]:
        """Roda todas as regras na ordem declarada; nenhuma interrompe as demais."""
        violations: List[Violation] = []
        for rule in self.rules:
            violations.extend(rule.apply(candidate))
        return violations
