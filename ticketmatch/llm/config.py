from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
load_dotenv(Path(__file__).resolve().parent.parent.parent / ".env")


def _env_flag(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class LLMConfig:
    api_key: str = os.getenv("GROQ_API_KEY", "")
    model: str = os.getenv("TICKETMATCH_LLM_MODEL", "llama-3.3-70b-versatile")
    timeout: float = 10.0
    max_tokens: int = 512
    enabled: bool = _env_flag("TICKETMATCH_LLM_ENABLED", True)


DEFAULT_LLM_CONFIG = LLMConfig()
