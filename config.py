from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import List, Tuple

from dotenv import load_dotenv
load_dotenv()

# 1) Carrega o .env ANTES de ler qualquer variável de ambiente
ROOT = Path(__file__).resolve().parent
load_dotenv(ROOT / ".env")

DEFAULT_MODELS = (
    "ollama:chat:gemma3:12b|Gemma3 12B (baseline),"
    "ollama:chat:phi4-mini|Phi-4 Mini 3.8B,"
    "ollama:chat:llama3.2:3b|Llama 3.2 3B,"
    "ollama:chat:granite3.3:8b|Granite 3.3 8B"
)


def parse_models(raw: str) -> List[Tuple[str, str]]:
    """Converte 'id|label,id|label' em [(id, label), ...]; label opcional."""
    models: List[Tuple[str, str]] = []
    for item in (raw or "").split(","):
        item = item.strip()
        if not item:
            continue
        pid, _, label = item.partition("|")
        models.append((pid.strip(), label.strip() or pid.strip()))
    return models


@dataclass(frozen=True)
class Settings:
    # Banco (fixtures)
    database_url: str | None = os.getenv("DATABASE_URL")

    # Perfil de avaliação padrão
    eval_profile: str = os.getenv("EVAL_PROFILE", "chunk-analysis")

    # Execução
    results_dir: str = os.getenv("RESULTS_DIR", "output")
    run_id: str = os.getenv("RUN_ID", "RUN-LOCAL-001")

    # Extração de casos de teste
    test_cases_dir: str = os.getenv("TEST_CASES_DIR", "test-cases")
    chunk_size_chars: int = int(os.getenv("CHUNK_SIZE_CHARS", "8000"))
    fixture_limit: int = int(os.getenv("FIXTURE_LIMIT", "5"))

    # Config do runner externo
    eval_timeout_ms: int = int(os.getenv("EVAL_TIMEOUT_MS", "900000"))
    judge_provider: str = os.getenv("JUDGE_PROVIDER", "anthropic:messages:claude-sonnet-4-6")
    rubric_threshold: float = float(os.getenv("RUBRIC_THRESHOLD", "0.6"))
    models: str = os.getenv("OLLAMA_MODELS", DEFAULT_MODELS)

    # Janela de contexto dinâmica
    min_num_ctx: int = int(os.getenv("MIN_NUM_CTX", "8192"))
    ctx_headroom: int = int(os.getenv("CTX_HEADROOM", "4096"))
    chars_per_token: float = float(os.getenv("CHARS_PER_TOKEN", "3.5"))

    @property
    def providers(self) -> List[Tuple[str, str]]:
        return parse_models(self.models)


settings = Settings()
