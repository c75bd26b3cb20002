"""Read-only HTTP client for the Toggl Track time-entries endpoint."""
from __future__ import annotations
import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any
import httpx
from pydantic import BaseModel, ValidationError
from worktrail.domain.exceptions import TogglApiError

logger = logging.getLogger(__name__)

TOGGL_API_BASE_URL = "https://api.track.toggl.com"
TIME_ENTRIES_ENDPOINT = "/api/v9/me/time_entries"


class TogglTimeEntry(BaseModel):
    """One entry as returned by the API. ``start`` is required; ``stop`` may be null."""

    id: int
    description: str | None = None
    start: datetime
    stop: datetime | None = None
    project_id: int | None = None
    workspace_id: int | None = None


@dataclass
class FetchResult:
    entries: list[TogglTimeEntry]
    rejected: list[dict[str, Any]] = field(default_factory=list)


class TogglClient:
    def __init__(
        self,
        username: str,
        password: str,
        *,
        base_url: str = TOGGL_API_BASE_URL,
        timeout: float | None = 30.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._client = httpx.Client(
            base_url=base_url,
            auth=httpx.BasicAuth(username, password),
            timeout=timeout,
            transport=transport,
        )

    def __enter__(self) -> "TogglClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self) -> None:
        self._client.close()

    def _raise_for_status(self, resp: httpx.Response) -> None:
        if resp.is_success:
            return
        if resp.status_code in (401, 403):
            raise TogglApiError(f"Toggl rejected the credentials [{resp.status_code}]")
        raise TogglApiError(f"Toggl returned [{resp.status_code}] {resp.text[:200]}")

    def get_time_entries(self, start_date: date, end_date: date) -> FetchResult:
        """Entries started in ``[start_date, end_date)``; invalid items are rejected, not fatal."""
        params = {"start_date": start_date.isoformat(), "end_date": end_date.isoformat()}
        logger.debug("GET %s %s", TIME_ENTRIES_ENDPOINT, params)
        try:
            resp = self._client.get(TIME_ENTRIES_ENDPOINT, params=params)
        except httpx.HTTPError as exc:
            raise TogglApiError(f"Could not reach Toggl: {exc}") from exc
        self._raise_for_status(resp)

        try:
            payload = resp.json()
        except ValueError as exc:
            raise TogglApiError(f"Toggl response is not JSON: {exc}") from exc
        if not isinstance(payload, list):
            raise TogglApiError("Toggl response is not a list of time entries")

        result = FetchResult(entries=[])
        for item in payload:
            try:
                result.entries.append(TogglTimeEntry.model_validate(item))
            except ValidationError as exc:
                logger.warning("Rejected time entry %s: %s", _item_id(item), exc.errors()[0]["msg"])
                result.rejected.append(item if isinstance(item, dict) else {"value": item})
        logger.debug("Fetched %d entries, rejected %d", len(result.entries), len(result.rejected))
        return result


def _item_id(item: Any) -> Any:
    return item.get("id") if isinstance(item, dict) else item
