"""Advisory text generator client (OpenAI-compatible chat completions)"""

import json
from typing import Any, Dict, Optional

import httpx

from oik_projection.config import settings
from oik_projection.domain.exceptions import AdvisoryGenerationError
from oik_projection.domain.models import AdvisoryNarrative
from oik_projection.domain.narrator import parse_narrative
from oik_projection.infrastructure.observability.metrics import advisory_latency_histogram

SYSTEM_PROMPT = (
    "Você é um consultor financeiro familiar brasileiro. Analise os dados agregados e forneça dicas "
    "práticas e acolhedoras em português. Seja breve e direto. Use linguagem simples e encorajadora. "
    "Dê atenção especial ao comprometimento fixo da renda e aos meses com sobra negativa. "
    'Retorne EXATAMENTE um JSON com: { "tips": ["dica1", "dica2", "dica3"], '
    '"alert": "alerta se houver risco ou null", "recommendation": "recomendação prática" }'
)


class AdvisoryClient:
    """LLM-backed narrative generator; every failure surfaces as AdvisoryGenerationError"""

    def __init__(
        self,
        api_url: str | None = None,
        api_key: str | None = None,
        model: str | None = None,
        timeout: float | None = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_url = api_url or settings.advisory_api_url
        self.api_key = api_key or settings.advisory_api_key
        self.model = model or settings.advisory_model
        self.timeout = timeout or settings.advisory_timeout_seconds
        self.transport = transport

    def build_payload(self, stats: Dict[str, Any]) -> Dict[str, Any]:
        return {
            "model": self.model,
            "messages": [
                {"role": "system", "content": SYSTEM_PROMPT},
                {
                    "role": "user",
                    "content": "Analise estes dados financeiros agregados e dê 3 dicas práticas:\n"
                    + json.dumps(stats, ensure_ascii=False, indent=2),
                },
            ],
        }

    async def generate(self, stats: Dict[str, Any]) -> AdvisoryNarrative:
        """
        Call the generator once (no retries) within the configured timeout.

        Raises:
            AdvisoryGenerationError: Network error, non-2xx, or malformed content
        """
        if not self.api_key:
            raise AdvisoryGenerationError("Advisory API key not configured")

        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            try:
                with advisory_latency_histogram.time():
                    response = await client.post(
                        self.api_url,
                        headers={"Authorization": f"Bearer {self.api_key}"},
                        json=self.build_payload(stats),
                    )
                    response.raise_for_status()
                data = response.json()
                content = data["choices"][0]["message"]["content"]
            except httpx.TimeoutException as e:
                raise AdvisoryGenerationError(f"Advisory timeout after {self.timeout}s") from e
            except httpx.HTTPStatusError as e:
                raise AdvisoryGenerationError(f"Advisory API error: {e.response.status_code}") from e
            except httpx.HTTPError as e:
                raise AdvisoryGenerationError(f"Advisory API unavailable: {e}") from e
            except (KeyError, IndexError, ValueError, TypeError) as e:
                raise AdvisoryGenerationError(f"Invalid advisory response: {e}") from e

        if not isinstance(content, str):
            raise AdvisoryGenerationError("Advisory response has no text content")
        return parse_narrative(content)
