"""Client for Dune query results - baseline holder snapshots."""

from typing import Any

from .base import ProviderClient
from .errors import MalformedResponse, UpstreamUnavailable

PROVIDER = "dune"

# Column names seen across the saved holder-count queries
COUNT_COLUMNS = ("eth_holder_count", "base_holder_count", "holder_count", "holders", "count")


def parse_holder_count(data: Any) -> int:
    """Read the holder count from the first row of a query result."""
    result = data.get("result") if isinstance(data, dict) else None
    rows = result.get("rows") if isinstance(result, dict) else None
    if not isinstance(rows, list) or not rows or not isinstance(rows[0], dict):
        raise MalformedResponse(PROVIDER, "query result has no rows")

    row = rows[0]
    for column in COUNT_COLUMNS:
        if row.get(column):
            value = row[column]
            break
    else:
        value = next(iter(row.values()), 0)

    try:
        return int(value or 0)
    except (TypeError, ValueError) as e:
        raise MalformedResponse(PROVIDER, f"non-numeric holder count {value!r}") from e


class DuneClient(ProviderClient):
    PROVIDER = PROVIDER

    def __init__(self, api_key: str | None, base_url: str = "https://api.dune.com/api/v1", **kwargs):
        super().__init__(base_url, **kwargs)
        self.api_key = api_key

    async def get_holder_count(self, query_id: str) -> int:
        if not self.api_key:
            raise UpstreamUnavailable(PROVIDER, "DUNE_API_KEY not configured")

        data = await self._get_json(
            f"{self.base_url}/query/{query_id}/results",
            headers={"X-Dune-API-Key": self.api_key},
            cache_ttl=self.cache_ttl,
        )
        return parse_holder_count(data)
