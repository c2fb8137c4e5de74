"""Supabase REST client for persisting flagged transactions"""

import httpx
from typing import Any, Dict, List, Sequence
from fraudscan.domain.models import FinalRecord
from fraudscan.domain.exceptions import ConfigurationError, PersistenceError
from fraudscan.config import settings


def to_row(record: FinalRecord) -> Dict[str, Any]:
    """Map a final record onto the fraud_detections table columns"""
    return {
        "ba": record.business_area,
        "monthly": record.period,
        "act_code": record.activity_code,
        "amount": record.amount,
        "fraud_score": record.fraud_score,
        "deviation_ratio": record.deviation_ratio,
        "ai_reason": record.reason,
        "is_flagged": True,
    }


class SupabaseClient:
    """Client for inserting analysis results through the Supabase PostgREST API"""

    def __init__(
        self,
        url: str | None = None,
        api_key: str | None = None,
        table: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.url = url or settings.supabase_url
        self.api_key = api_key or settings.supabase_anon_key
        self.table = table or settings.supabase_table
        self.timeout = timeout or settings.http_timeout_seconds
        self.transport = transport

    async def save_results(self, records: Sequence[FinalRecord]) -> List[Dict[str, Any]]:
        """
        Insert all records in a single request; the batch succeeds or fails as a whole.

        Returns:
            Rows as stored by the datastore

        Raises:
            ConfigurationError: Supabase URL or key is not configured
            PersistenceError: On timeout, HTTP errors, or invalid response
        """
        if not self.url or not self.api_key:
            raise ConfigurationError(
                "Supabase client not initialized. Set SUPABASE_URL and SUPABASE_ANON_KEY in the environment."
            )

        if not records:
            return []

        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            try:
                response = await client.post(
                    f"{self.url.rstrip('/')}/rest/v1/{self.table}",
                    headers={
                        "apikey": self.api_key,
                        "Authorization": f"Bearer {self.api_key}",
                        "Prefer": "return=representation",
                    },
                    json=[to_row(r) for r in records],
                )
                response.raise_for_status()
                data = response.json()
                if not isinstance(data, list):
                    raise PersistenceError("Unexpected insert response from Supabase")
                return data

            except httpx.TimeoutException as e:
                raise PersistenceError(f"Supabase timeout after {self.timeout}s") from e
            except httpx.HTTPStatusError as e:
                raise PersistenceError(
                    f"Supabase insert failed: {e.response.status_code}. Check the URL and key."
                ) from e
            except httpx.RequestError as e:
                raise PersistenceError(f"Supabase unreachable: {e}") from e
            except ValueError as e:
                raise PersistenceError(f"Invalid response from Supabase: {e}") from e
