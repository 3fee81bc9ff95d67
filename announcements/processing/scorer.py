"""External quality scoring through an OpenAI-compatible chat completions API."""
from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Optional, Protocol, Sequence

import requests

from announcements.core.errors import ConfigurationError, ScoringBatchError
from announcements.core.utils import get_config_value, get_float_setting, load_env_file

logger = logging.getLogger(__name__)
DEFAULT_SECRET_FILE = Path(__file__).resolve().parents[2] / "secrets" / "openai.env"
_AI_ENV_LOADED = False

DEFAULT_MODEL = "gpt-4o-mini"
DEFAULT_BASE_URL = "https://api.openai.com/v1"
DEFAULT_TIMEOUT = 60

SYSTEM_PROMPT = (
    "Você avalia a qualidade de comunicados institucionais. Responda APENAS com JSON, "
    'no formato {"resultados": [...]}, sem texto adicional.'
)

RUBRIC = """Avalie a qualidade da comunicação de cada texto a seguir segundo as 6 dimensões:
1. Clareza (0–10)
2. Empatia (0–10)
3. Coerência Institucional (0–10)
4. Formalidade e Tom (0–10)
5. Eficácia Comunicativa (0–10)
6. Padrões Linguísticos e Ortográficos (0–10)

Retorne um objeto JSON com a chave "resultados" contendo um item por texto, no formato:
{"resultados": [{
  "id": "<id do registro>",
  "clareza": <num>,
  "empatia": <num>,
  "coerencia": <num>,
  "formalidade": <num>,
  "eficacia": <num>,
  "linguistica": <num>,
  "comentario": "<texto explicativo curto>"
}, ...]}

Textos:
"""


class BatchScorer(Protocol):
    """Anything that can score one batch payload and return the raw response."""

    def score_batch(self, payload: Sequence[Dict[str, str]]) -> Any:
        ...


def _ensure_ai_env() -> None:
    """Load AI credentials from a local secrets file once per process."""

    global _AI_ENV_LOADED
    if _AI_ENV_LOADED:
        return

    _AI_ENV_LOADED = True
    secret_location = os.getenv("AI_SECRET_FILE")
    path = Path(secret_location).expanduser() if secret_location else DEFAULT_SECRET_FILE
    load_env_file(path)


def build_prompt(payload: Sequence[Dict[str, str]]) -> str:
    return RUBRIC + json.dumps(list(payload), ensure_ascii=False)


def _unwrap_results(content: str) -> str:
    """JSON mode only returns objects; hand the inner array to the merger."""

    try:
        decoded = json.loads(content)
    except json.JSONDecodeError:
        return content
    if isinstance(decoded, dict) and "resultados" in decoded:
        return json.dumps(decoded["resultados"], ensure_ascii=False)
    return content


def _resolve_timeout() -> float:
    try:
        timeout = get_float_setting("SCORING_TIMEOUT", DEFAULT_TIMEOUT)
    except ValueError as exc:
        raise ConfigurationError(f"Invalid SCORING_TIMEOUT: {exc}") from exc
    if not timeout > 0:
        raise ConfigurationError(f"SCORING_TIMEOUT must be a positive number of seconds, got {timeout}")
    return timeout


class LLMScorer:
    """Scores announcement batches with a chat completions model."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        session: Optional[requests.Session] = None,
    ) -> None:
        _ensure_ai_env()
        self.api_key = api_key or get_config_value("OPENAI_API_KEY") or None
        self.model = model or get_config_value("OPENAI_MODEL", DEFAULT_MODEL)
        self.base_url = (base_url or get_config_value("OPENAI_BASE_URL", DEFAULT_BASE_URL)).rstrip("/")
        self.timeout = timeout or _resolve_timeout()
        self.session = session or requests.Session()
        if not self.api_key:
            logger.warning("OPENAI_API_KEY is not configured; every batch will fail to score.")

    def score_batch(self, payload: Sequence[Dict[str, str]]) -> str:
        """Send one batch and return the model's raw JSON text."""

        if not self.api_key:
            raise ScoringBatchError("OPENAI_API_KEY is not configured")

        body = {
            "model": self.model,
            "messages": self._messages(payload),
            "temperature": 0,
            "response_format": {"type": "json_object"},
        }
        try:
            response = self.session.post(
                f"{self.base_url}/chat/completions",
                headers={"Authorization": f"Bearer {self.api_key}", "Content-Type": "application/json"},
                json=body,
                timeout=self.timeout,
            )
            response.raise_for_status()
            content = response.json()["choices"][0]["message"]["content"]
        except requests.RequestException as exc:
            raise ScoringBatchError(f"scoring request failed: {exc}") from exc
        except (ValueError, KeyError, IndexError, TypeError) as exc:
            raise ScoringBatchError(f"unexpected scoring response envelope: {exc!r}") from exc

        if not isinstance(content, str):
            raise ScoringBatchError("scoring response has no text content")
        logger.debug("Scoring response for %d texts: %s", len(payload), content[:500])
        return _unwrap_results(content)

    def _messages(self, payload: Sequence[Dict[str, str]]) -> List[Dict[str, str]]:
        return [
            {"role": "system", "content": SYSTEM_PROMPT},
            {"role": "user", "content": build_prompt(payload)},
        ]
