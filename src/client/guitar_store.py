"""Client-side data access for the guitar API.

A ``GuitarStore`` is created per UI session around an ``httpx.Client`` that
already carries the base URL and the bearer token. Components receive the store
explicitly instead of reaching for shared global state.
"""

import logging
from dataclasses import dataclass
from typing import Any

import httpx

from src.services.price_stats import PriceSummary, summarize_prices

logger = logging.getLogger(__name__)

GUITARS_PATH = "/api/v1/guitars"

# Largest page the API accepts
PAGE_SIZE = 100


class GuitarStoreError(Exception):
    """A request to the guitar API failed."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


@dataclass
class GuitarQuery:
    """Filters understood by ``GET /guitars``. Lists become repeated query keys."""

    type: list[str] | None = None
    manufacturer: list[str] | None = None
    condition: list[str] | None = None
    strings: list[int] | None = None
    min_price: float | None = None
    max_price: float | None = None
    search: str | None = None
    model: str | None = None

    def to_params(self) -> list[tuple[str, str]]:
        params: list[tuple[str, str]] = []
        for key, values in (
            ("type", self.type),
            ("manufacturer", self.manufacturer),
            ("condition", self.condition),
            ("strings", self.strings),
        ):
            params.extend((key, str(value)) for value in values or [])
        if self.min_price is not None:
            params.append(("minPrice", str(self.min_price)))
        if self.max_price is not None:
            params.append(("maxPrice", str(self.max_price)))
        if self.search:
            params.append(("search", self.search))
        if self.model:
            params.append(("model", self.model))
        return params


def _error_message(response: httpx.Response, fallback: str) -> str:
    try:
        body = response.json()
    except ValueError:
        return f"{fallback} (status: {response.status_code})"
    if isinstance(body, dict) and body.get("error"):
        return str(body["error"])
    return f"{fallback} (status: {response.status_code})"


class GuitarStore:
    """Holds the session's guitar list and mirrors successful writes locally."""

    def __init__(self, http: httpx.Client):
        self.http = http
        self.guitars: list[dict[str, Any]] = []
        self.is_loading = False
        self.error: str | None = None

    def _request(self, method: str, path: str, fallback: str, **kwargs: Any) -> httpx.Response:
        try:
            response = self.http.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            raise GuitarStoreError(f"{fallback}: {e}") from e
        if response.is_error:
            raise GuitarStoreError(_error_message(response, fallback), response.status_code)
        return response

    def _fetch_page(self, params: list[tuple[str, str]], page: int) -> dict[str, Any]:
        response = self._request(
            "GET",
            GUITARS_PATH,
            "Failed to fetch guitars",
            params=[*params, ("page", str(page)), ("limit", str(PAGE_SIZE))],
        )
        return response.json()

    def list_guitars(self) -> list[dict[str, Any]]:
        """Reload every guitar (all pages) into ``guitars``."""
        self.is_loading = True
        self.error = None
        try:
            guitars: list[dict[str, Any]] = []
            page = 1
            while True:
                body = self._fetch_page([], page)
                guitars.extend(body["data"])
                if not body["meta"]["hasNextPage"]:
                    break
                page += 1
            self.guitars = guitars
        except GuitarStoreError as e:
            logger.error(f"Error refreshing guitars: {e.message}")
            self.error = e.message
            self.guitars = []
        finally:
            self.is_loading = False
        return self.guitars

    def create(self, guitar: dict[str, Any]) -> dict[str, Any]:
        """Create a guitar and append it locally.

        Raises:
            GuitarStoreError: the API rejected the guitar; ``error`` holds the message.
        """
        self.is_loading = True
        self.error = None
        try:
            created = self._request("POST", GUITARS_PATH, "Failed to add guitar", json=guitar).json()
        except GuitarStoreError as e:
            logger.error(f"Error adding guitar: {e.message}")
            self.error = e.message
            raise
        finally:
            self.is_loading = False
        self.guitars.append(created)
        return created

    def update(self, guitar_id: int, changes: dict[str, Any]) -> dict[str, Any] | None:
        """Patch a guitar and merge the result locally. Returns None on failure."""
        self.is_loading = True
        self.error = None
        try:
            updated = self._request(
                "PATCH", f"{GUITARS_PATH}/{guitar_id}", "Failed to update guitar", json=changes
            ).json()
        except GuitarStoreError as e:
            logger.error(f"Error updating guitar {guitar_id}: {e.message}")
            self.error = e.message
            return None
        finally:
            self.is_loading = False

        self.guitars = [
            {**guitar, **updated} if guitar["id"] == guitar_id else guitar
            for guitar in self.guitars
        ]
        return updated

    def delete(self, guitar_id: int) -> bool:
        """Delete a guitar and drop it locally. Returns False on failure."""
        self.is_loading = True
        self.error = None
        try:
            self._request("DELETE", f"{GUITARS_PATH}/{guitar_id}", "Failed to delete guitar")
        except GuitarStoreError as e:
            logger.error(f"Error deleting guitar {guitar_id}: {e.message}")
            self.error = e.message
            return False
        finally:
            self.is_loading = False

        self.guitars = [guitar for guitar in self.guitars if guitar["id"] != guitar_id]
        return True

    def filtered_fetch(
        self,
        query: GuitarQuery | None = None,
        sort_field: str | None = None,
        sort_direction: str = "asc",
    ) -> list[dict[str, Any]]:
        """Fetch guitars matching ``query`` without touching ``guitars``.

        Only the first page (up to 100 guitars) is returned. Returns an empty
        list on failure.
        """
        params = query.to_params() if query else []
        if sort_field:
            params += [("sortField", sort_field), ("sortDirection", sort_direction)]

        self.is_loading = True
        self.error = None
        try:
            return self._fetch_page(params, 1)["data"]
        except GuitarStoreError as e:
            logger.error(f"Error getting filtered guitars: {e.message}")
            self.error = e.message
            return []
        finally:
            self.is_loading = False

    def price_summary(self) -> PriceSummary | None:
        """Price statistics over the locally held guitars."""
        return summarize_prices((guitar["id"], guitar["price"]) for guitar in self.guitars)
