from __future__ import annotations

import json
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

from sqlalchemy import create_engine, text

_SENTENCE_BOUNDARY_RE = re.compile(r"(?<=[.!?])\s+")
_BULLET_PREFIX_RE = re.compile(r"^[-•*]\s*")

LATEST_EPISODE_SQL = """
    SELECT
      e.id,
      e.title,
      p.name AS podcast_name,
      e.transcript_text,
      e.political_stance,
      e.bullet_points_summary,
      e.completed_at
    FROM episodes e
    JOIN podcasts p ON e.podcast_id = p.id
    WHERE e.transcript_text IS NOT NULL
      AND e.political_stance IS NOT NULL
      AND e.summary IS NOT NULL
      AND e.completed_at IS NOT NULL
      AND length(e.transcript_text) > 5000
    ORDER BY e.completed_at DESC
    LIMIT 1
"""

EXTRACT_EPISODES_SQL = """
    SELECT
      e.id,
      e.title,
      p.name AS podcast_name,
      e.transcript_text,
      e.political_stance,
      e.summary,
      e.paragraph_summary,
      e.bullet_points_summary,
      e.political_stance_explanation,
      e.analysis_confidence,
      e.topics
    FROM episodes e
    JOIN podcasts p ON e.podcast_id = p.id
    WHERE e.transcript_text IS NOT NULL
      AND e.political_stance IS NOT NULL
      AND e.summary IS NOT NULL
      AND e.paragraph_summary IS NOT NULL
      AND e.completed_at IS NOT NULL
      AND length(e.transcript_text) > 5000
    ORDER BY e.completed_at DESC
    LIMIT 20
"""


@dataclass(frozen=True)
class EpisodeFixture:
    """Caso de teste dinâmico derivado do episódio mais recente."""
    transcript: str
    description: str
    factuality_facts: str
    transcript_char_count: int


def number_sentences(text_: str) -> str:
    """Numera as frases como o chunker: cada uma ganha prefixo [N]."""
    sentences = [s for s in _SENTENCE_BOUNDARY_RE.split(text_ or "") if s.strip()]
    return "\n".join(f"[{i}] {s}" for i, s in enumerate(sentences))


def slugify(text_: str) -> str:
    s = re.sub(r"[^a-z0-9]+", "-", (text_ or "").lower())
    return s.strip("-")[:60]


def _parse_json_list(raw: Optional[str]) -> List[Any]:
    if not raw:
        return []
    value = json.loads(raw)
    return value if isinstance(value, list) else []


def build_factuality_facts(episode: Mapping[str, Any]) -> str:
    """Fatos para a checagem de factualidade: bullet points + postura política."""
    facts: List[str] = []

    raw = episode.get("bullet_points_summary")
    if raw:
        try:
            bullets = json.loads(raw)
        except ValueError:
            bullets = None
        if isinstance(bullets, list):
            facts.extend(b.strip() for b in bullets if isinstance(b, str) and b.strip())
        else:
            # não é uma lista JSON: trata como lista separada por linhas
            lines = [ln for ln in raw.split("\n") if ln.strip()]
            facts.extend(b for b in (_BULLET_PREFIX_RE.sub("", ln.strip()).strip() for ln in lines) if b)

    stance = episode.get("political_stance")
    if stance:
        facts.append(f"The overall political stance of this episode is {stance}.")

    return "\n".join(facts)


def _query(database_url: str, sql: str) -> List[Dict[str, Any]]:
    engine = create_engine(database_url, future=True)
    try:
        with engine.connect() as con:
            return [dict(row) for row in con.execute(text(sql)).mappings()]
    finally:
        engine.dispose()


def fetch_latest_episode(database_url: Optional[str]) -> EpisodeFixture:
    """Busca o episódio concluído mais recente e monta o caso de teste."""
    if not database_url:
        raise ValueError("DATABASE_URL não configurada no .env.")

    rows = _query(database_url, LATEST_EPISODE_SQL)
    if not rows:
        raise LookupError("No completed episodes with analysis found in database")

    ep = rows[0]
    transcript_text = ep["transcript_text"]
    return EpisodeFixture(
        transcript=number_sentences(transcript_text),
        description=f"{ep['podcast_name']} — {ep['title']}",
        factuality_facts=build_factuality_facts(ep),
        transcript_char_count=len(transcript_text),
    )


def select_diverse(episodes: List[Dict[str, Any]], limit: int = 5) -> List[Dict[str, Any]]:
    """Prefere posturas diferentes, mas sempre aceita os 3 primeiros."""
    selected: List[Dict[str, Any]] = []
    seen = set()
    for ep in episodes:
        if len(selected) >= limit:
            break
        if ep["political_stance"] not in seen or len(selected) < 3:
            selected.append(ep)
            seen.add(ep["political_stance"])
    return selected


def expected_meta(ep: Mapping[str, Any]) -> Dict[str, Any]:
    """Saída meta-analysis esperada, a partir dos campos de produção."""
    return {
        "paragraphSummary": ep.get("paragraph_summary"),
        "summary": ep.get("summary"),
        "bulletPointsSummary": _parse_json_list(ep.get("bullet_points_summary")),
        "analysisConfidence": ep.get("analysis_confidence") or "medium",
        "politicalStance": ep.get("political_stance"),
        "stanceExplanation": ep.get("political_stance_explanation") or "",
        "topQuotes": [],  # não existe no nível do episódio
        "topics": _parse_json_list(ep.get("topics")),
    }


def extract_test_data(
    database_url: Optional[str],
    out_dir: Path,
    chunk_size_chars: int = 8000,
    limit: int = 5,
) -> List[Path]:
    """
    Grava transcrições (primeiro chunk, numerado) e o meta esperado por episódio.
    Retorna os arquivos escritos.
    """
    if not database_url:
        raise ValueError("DATABASE_URL não configurada no .env.")

    episodes = _query(database_url, EXTRACT_EPISODES_SQL)
    if not episodes:
        raise LookupError("No suitable episodes found")

    transcript_dir = out_dir / "transcripts"
    expected_dir = out_dir / "expected"
    transcript_dir.mkdir(parents=True, exist_ok=True)
    expected_dir.mkdir(parents=True, exist_ok=True)

    written: List[Path] = []
    for ep in select_diverse(episodes, limit):
        slug = slugify(ep["podcast_name"]) + "-" + slugify(ep["title"])

        t_path = transcript_dir / f"{slug}.txt"
        t_path.write_text(number_sentences(ep["transcript_text"][:chunk_size_chars]), encoding="utf-8")

        m_path = expected_dir / f"{slug}-meta.json"
        m_path.write_text(json.dumps(expected_meta(ep), ensure_ascii=False, indent=2), encoding="utf-8")

        print(f"[FETCH] {ep['title']} ({ep['political_stance']}) -> {t_path.name}, {m_path.name}")
        written.extend([t_path, m_path])
    return written
