"""
Input feed - Fetch the flat record list over HTTP.

Failures never raise out of fetch(): transport errors, bad status codes,
malformed JSON and records that fail validation all come back as a
FetchResult with is_error set and a message. Retrying is the caller's call.
"""

import logging
from dataclasses import dataclass, field
from typing import Optional

import httpx
from pydantic import ValidationError

from flow_core.models import Record, parse_records


logger = logging.getLogger(__name__)


@dataclass
class FetchResult:
    """Outcome of one fetch."""
    records: list[Record] = field(default_factory=list)
    is_error: bool = False
    error: Optional[str] = None


class FlowFeed:
    """Reads the record list from a URL."""

    def __init__(
        self,
        data_url: str,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self._data_url = data_url
        self._timeout = timeout
        self._transport = transport

    async def fetch(self) -> FetchResult:
        """Fetch and validate the record list."""
        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                response = await client.get(self._data_url)
                response.raise_for_status()
                payload = response.json()
            records = parse_records(payload)
        except httpx.HTTPStatusError as e:
            return self._failed(
                f"Failed to fetch flow data: {e.response.status_code} {e.response.reason_phrase}"
            )
        except httpx.HTTPError as e:
            return self._failed(f"Connection failed: {e}")
        except ValidationError as e:
            return self._failed(f"Invalid flow data: {e.error_count()} validation error(s)")
        except ValueError as e:
            return self._failed(f"Invalid flow data: {e}")

        logger.info("Fetched %d records from %s", len(records), self._data_url)
        return FetchResult(records=records)

    def _failed(self, message: str) -> FetchResult:
        logger.warning("%s (%s)", message, self._data_url)
        return FetchResult(is_error=True, error=message)
