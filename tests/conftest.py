"""
Fixtures compartilhadas: candidatos válidos de cada perfil.
Os módulos ficam na raiz do projeto (layout plano), daí o sys.path.
"""
import copy
import os
import sys

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from engine import EngineConfig, ScoringEngine


VALID_CHUNK = {
    "keyPoints": ["The host argues for stricter oversight of lobbying."],
    "quotes": [
        {"startIndex": 3, "endIndex": 5, "context": "Host criticises lobbying rules", "significance": "high"},
    ],
    "stanceSignals": [
        {"topic": "lobbying", "position": "supports stricter oversight", "strength": "strong"},
    ],
    "topics": ["lobbying", "ethics"],
    "tone": "critical",
}

VALID_META = {
    "politicalStance": "Centrist",
    "paragraphSummary": "The hosts debate lobbying reform and its effect on elections.",
    "summary": "A debate on lobbying reform.",
    "bulletPointsSummary": ["Lobbying reform", "Election finance", "Public trust", "Oversight"],
    "analysisConfidence": "medium",
    "stanceExplanation": "Both sides are given balanced airtime here.",
    "topQuotes": [],
    "topics": ["lobbying", "elections", "ethics"],
}


@pytest.fixture
def engine():
    return ScoringEngine(EngineConfig())


@pytest.fixture
def chunk():
    """Cópia nova de um chunk válido (os testes podem mutar à vontade)."""
    return copy.deepcopy(VALID_CHUNK)


@pytest.fixture
def meta():
    return copy.deepcopy(VALID_META)
