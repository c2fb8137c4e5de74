"""Gemini API client for scoring suspicious transactions"""

import json
import math
import logging
import httpx
from typing import Any, Dict, List, Sequence
from fraudscan.domain.models import ProcessedRecord, ScoreResult
from fraudscan.domain.exceptions import ConfigurationError, ScorerAPIError
from fraudscan.config import settings

logger = logging.getLogger(__name__)

PROMPT_TEMPLATE = """
You are a financial fraud detection expert. Analyze the following list of suspicious transactions.
Each item contains the Business Area (businessArea), Amount, Activity Code (activityCode), \
Avg Amount for that Code (categoryAverageAmount), and Deviation Ratio.

Task:
1. Evaluate the risk of fraud based on the amount deviation, frequency anomalies (if implied), and high value.
2. Assign a fraud score between 0.0 (safe) and 1.0 (definite fraud).
3. Provide a short, concise reason (under 20 words) for your score.

Input Data (JSON):
{payload}
"""

RESPONSE_SCHEMA = {
    "type": "ARRAY",
    "items": {
        "type": "OBJECT",
        "properties": {
            "id": {"type": "NUMBER"},
            "fraudScore": {"type": "NUMBER"},
            "reason": {"type": "STRING"},
        },
        "required": ["id", "fraudScore", "reason"],
    },
}


def build_candidate_payload(candidates: Sequence[ProcessedRecord]) -> List[Dict[str, Any]]:
    """Fields the scorer sees for each candidate"""
    return [
        {
            "id": c.id,
            "businessArea": c.business_area,
            "activityCode": c.activity_code,
            "amount": c.amount,
            "categoryAverageAmount": c.category_average,
            "deviationRatio": c.deviation_ratio,
        }
        for c in candidates
    ]


def parse_score_results(text: str | None) -> List[ScoreResult]:
    """
    Turn the model's JSON text into score results.

    Anything other than a JSON array yields no results. Items without a
    whole-number id or a finite numeric score are skipped; scores are not
    clamped.
    """
    if not text:
        return []
    try:
        data = json.loads(text)
    except ValueError:
        logger.warning("Scorer returned non-JSON text")
        return []
    if not isinstance(data, list):
        return []

    results = []
    for item in data:
        if not isinstance(item, dict):
            continue
        record_id = item.get("id")
        score = item.get("fraudScore")
        if isinstance(record_id, bool) or not isinstance(record_id, (int, float)):
            continue
        if isinstance(record_id, float) and not (math.isfinite(record_id) and record_id.is_integer()):
            # fractional and non-finite ids match no row
            continue
        if isinstance(score, bool) or not isinstance(score, (int, float)):
            continue
        if isinstance(score, float) and not math.isfinite(score):
            continue
        results.append(
            ScoreResult(id=int(record_id), fraud_score=float(score), reason=str(item.get("reason") or ""))
        )
    return results


class GeminiClient:
    """Client for the Gemini generateContent API"""

    def __init__(
        self,
        api_key: str | None = None,
        model: str | None = None,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.api_key = api_key or settings.gemini_api_key
        self.model = model or settings.gemini_model
        self.base_url = (base_url or settings.gemini_api_base).rstrip("/")
        self.timeout = timeout or settings.http_timeout_seconds
        self.transport = transport

    def build_request(self, candidates: Sequence[ProcessedRecord]) -> Dict[str, Any]:
        prompt = PROMPT_TEMPLATE.format(payload=json.dumps(build_candidate_payload(candidates)))
        return {
            "contents": [{"role": "user", "parts": [{"text": prompt}]}],
            "generationConfig": {
                "responseMimeType": "application/json",
                "responseSchema": RESPONSE_SCHEMA,
            },
        }

    async def score_transactions(self, candidates: Sequence[ProcessedRecord]) -> List[ScoreResult]:
        """
        Ask the model for a fraud score and reason per candidate.

        An empty candidate list returns immediately without a call. A reply
        with no usable content means "no confirmed risks" and yields [].

        Raises:
            ConfigurationError: API key is not configured
            ScorerAPIError: On timeout, HTTP errors, or an unreadable response envelope
        """
        if not candidates:
            return []

        if not self.api_key:
            raise ConfigurationError("Gemini API key not found. Set GEMINI_API_KEY (or API_KEY) in the environment.")

        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            try:
                response = await client.post(
                    f"{self.base_url}/models/{self.model}:generateContent",
                    headers={"x-goog-api-key": self.api_key},
                    json=self.build_request(candidates),
                )
                response.raise_for_status()
                data = response.json()

                generated = data.get("candidates") or []
                parts = generated[0].get("content", {}).get("parts", []) if generated else []
                text = "".join(part.get("text", "") for part in parts)
                return parse_score_results(text)

            except httpx.TimeoutException as e:
                raise ScorerAPIError(f"Gemini API timeout after {self.timeout}s") from e
            except httpx.HTTPStatusError as e:
                raise ScorerAPIError(
                    f"Gemini API error: {e.response.status_code}. Check the API key and quota."
                ) from e
            except httpx.RequestError as e:
                raise ScorerAPIError(f"Gemini API unreachable: {e}") from e
            except (AttributeError, IndexError, ValueError, TypeError) as e:
                raise ScorerAPIError(f"Invalid response envelope from Gemini: {e}") from e
