from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional

from field_validators import (
    ArrayOf,
    CollectionSizeBounds,
    EnumMember,
    Integer,
    NonEmptyString,
    NonEmptyStringArray,
    OrderedPair,
    PresentString,
    SentenceCount,
    StringMinLength,
)
from rules import Rule, RuleSet

CHUNK_ANALYSIS = "chunk-analysis"
META_ANALYSIS = "meta-analysis"

SIGNIFICANCE = ("high", "medium", "low")
STRENGTH = ("strong", "moderate", "weak")
VALID_STANCES = ("Far Left", "Left-leaning", "Centrist", "Right-leaning", "Far Right")
VALID_CONFIDENCE = ("high", "medium", "low")

# meta-analysis conta itens válidos mas reporta sem "non-empty"
META_MIN_ITEMS = "{path} has {count} items (expected at least {minimum})"


class UnknownProfileError(KeyError):
    pass


@dataclass(frozen=True)
class Profile:
    """Perfil = nome + RuleSet + mensagem de sucesso."""
    name: str
    rule_set: RuleSet
    success_reason: str


# ─────────────────────────────────────────────────────────────
# chunk-analysis: keyPoints, quotes, stanceSignals, topics, tone
# ─────────────────────────────────────────────────────────────
CHUNK_RULES = RuleSet(
    rules=(
        Rule("keyPoints", CollectionSizeBounds(minimum=1, maximum=8)),
        Rule("quotes", ArrayOf(
            max_items=5,
            rules=(
                Rule("startIndex", Integer()),
                Rule("endIndex", Integer()),
                Rule("", OrderedPair("startIndex", "endIndex")),
                Rule("context", NonEmptyString()),
                Rule("significance", EnumMember(SIGNIFICANCE, message="{path} is invalid: {value}")),
            ),
        )),
        Rule("stanceSignals", ArrayOf(
            rules=(
                Rule("topic", NonEmptyString()),
                Rule("position", NonEmptyString()),
                Rule("strength", EnumMember(STRENGTH, message="{path} is invalid: {value}")),
            ),
        )),
        Rule("topics", NonEmptyStringArray()),
        Rule("tone", NonEmptyString()),
    ),
    total_weight=5,
)

# ─────────────────────────────────────────────────────────────
# meta-analysis: 8 dimensões do resumo do episódio
# ─────────────────────────────────────────────────────────────
META_RULES = RuleSet(
    rules=(
        Rule("politicalStance", EnumMember(VALID_STANCES)),
        Rule("paragraphSummary", PresentString()),
        Rule("paragraphSummary", SentenceCount(minimum=1)),
        Rule("paragraphSummary", StringMinLength(50)),
        Rule("summary", PresentString()),
        Rule("summary", StringMinLength(20)),
        Rule("bulletPointsSummary", CollectionSizeBounds(minimum=3, maximum=7, min_message=META_MIN_ITEMS)),
        Rule("analysisConfidence", EnumMember(VALID_CONFIDENCE, message='{path} "{value}" is not valid')),
        Rule("stanceExplanation", PresentString()),
        Rule("stanceExplanation", StringMinLength(30)),
        Rule("topQuotes", ArrayOf(
            rules=(
                Rule("text", StringMinLength(5, message="{path} is empty or too short", require_string=True)),
                Rule("context", NonEmptyString()),
            ),
        )),
        Rule("topics", CollectionSizeBounds(minimum=2, maximum=7, min_message=META_MIN_ITEMS)),
    ),
    total_weight=8,
)

CHUNK_PROFILE = Profile(CHUNK_ANALYSIS, CHUNK_RULES, "All chunk analysis quality checks passed")
META_PROFILE = Profile(META_ANALYSIS, META_RULES, "All meta-analysis quality checks passed")


class ProfileRegistry:
    """Registro de perfis; somente leitura depois de montado."""

    def __init__(self, profiles: Iterable[Profile] = ()):
        self._profiles: Dict[str, Profile] = {}
        for p in profiles:
            self.register(p)

    def register(self, profile: Profile) -> None:
        if profile.name in self._profiles:
            raise ValueError(f"Perfil já registrado: {profile.name}")
        self._profiles[profile.name] = profile

    def get(self, name: str) -> Profile:
        try:
            return self._profiles[name]
        except KeyError:
            raise UnknownProfileError(
                f"Perfil desconhecido: {name!r} (disponíveis: {', '.join(self.names())})"
            ) from None

    def names(self) -> List[str]:
        return list(self._profiles)

    def __contains__(self, name: Optional[str]) -> bool:
        return name in self._profiles


def default_registry() -> ProfileRegistry:
    return ProfileRegistry([CHUNK_PROFILE, META_PROFILE])
