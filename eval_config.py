from __future__ import annotations

import json
import math
from pathlib import Path
from typing import Any, Dict, Optional

from config import Settings, settings as default_settings
from engine import score_chunk_analysis, score_meta_analysis
from fixtures import EpisodeFixture
from schemas import CHUNK_OUTPUT_SCHEMA

CHUNK_GENERATION_OPTIONS: Dict[str, Any] = {
    "temperature": 0.2,
    "num_predict": 8192,
    "top_p": 0.9,
    "top_k": 40,
    "keep_alive": 0,
}

SEMANTIC_RUBRIC = """You are evaluating an LLM's political analysis of a podcast transcript.
The LLM was given a transcript and asked to extract keyPoints, quotes,
stanceSignals, topics, and tone. Verify the analysis is semantically
accurate by cross-referencing against the original transcript below.

Check: (1) Factual accuracy of keyPoints: flag any inversions, misattributions,
or fabricated claims. (2) Quote validity: do startIndex/endIndex ranges reference
content supporting the stated context? (3) Stance signal correctness: does each
position match what the transcript actually says? Watch for inverted positions
(e.g. "supports public hearings" when the speaker prefers depositions) and
misattributed stances. (4) Topic relevance: topics should reflect the transcript,
not hallucinated subjects.

ORIGINAL TRANSCRIPT:
{{transcript}}

Return a score between 0 and 1 using these deductions from a starting score of 1.0:
- Major error (fabricated claim, inverted position): -0.3
- Moderate error (misattribution, wrong name): -0.2
- Minor error (omission in parenthetical, imprecise phrasing): -0.1
List each error found with its severity before computing the final score."""


def compute_num_ctx(transcript_char_count: int, s: Settings = default_settings) -> int:
    """Janela de contexto: conversão grosseira chars->tokens + folga."""
    return max(s.min_num_ctx, math.ceil(transcript_char_count / s.chars_per_token) + s.ctx_headroom)


def provider_config(num_ctx: int) -> Dict[str, Any]:
    return {
        **CHUNK_GENERATION_OPTIONS,
        "num_ctx": num_ctx,
        "passthrough": {"format": CHUNK_OUTPUT_SCHEMA},
    }


def build_eval_config(episode: EpisodeFixture, s: Optional[Settings] = None) -> Dict[str, Any]:
    """Monta a config do runner externo para o episódio carregado."""
    s = s or default_settings
    cfg = provider_config(compute_num_ctx(episode.transcript_char_count, s))

    return {
        "description": "Blindspot LLM Political Analysis Evaluation",
        "providers": [{"id": pid, "label": label, "config": cfg} for pid, label in s.providers],
        "prompts": ["file://prompts/chunk-analysis.json"],
        "tests": [
            {
                "description": episode.description,
                "vars": {"transcript": episode.transcript},
                "assert": [
                    {"type": "is-json", "value": CHUNK_OUTPUT_SCHEMA},
                    {"type": "python", "value": "file://eval_config.py:get_assert"},
                    {"type": "llm-rubric", "value": SEMANTIC_RUBRIC, "threshold": s.rubric_threshold},
                    {"type": "factuality", "value": episode.factuality_facts},
                ],
            }
        ],
        "defaultTest": {
            "options": {
                "timeout": s.eval_timeout_ms,
                "provider": s.judge_provider,
            },
        },
    }


def write_eval_config(config: Dict[str, Any], path: Path) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as f:
        json.dump(config, f, ensure_ascii=False, indent=2)
    return path


# Pontos de entrada da asserção python do runner: recebem (output, context)
# e devolvem {pass, score, reason}.
def get_assert(output: Any, context: Any = None) -> Dict[str, Any]:
    return score_chunk_analysis(output).to_dict()


def get_meta_assert(output: Any, context: Any = None) -> Dict[str, Any]:
    return score_meta_analysis(output).to_dict()
