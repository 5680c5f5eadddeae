"""Tour catalog client for the booking backend's tours API."""
import logging
from typing import Any, Dict, List, Optional

import httpx

from config import CATALOG_API_URL, CATALOG_TIMEOUT_SECONDS
from models.tour import TourRecord

logger = logging.getLogger(__name__)


class CatalogError(Exception):
    """Raised when the tour catalog cannot be fetched or parsed."""


def parse_tour(record: Dict[str, Any]) -> TourRecord:
    """
    Build a TourRecord from an API record.

    The booking backend serializes numeric columns as strings, so price and
    duration are coerced.

    Raises:
        ValueError: If a required field is missing or not numeric
    """
    try:
        return TourRecord(
            id=str(record["id"]),
            title=str(record.get("title") or ""),
            destination=str(record.get("destination") or ""),
            price=float(record["price"]),
            duration_days=int(float(record["duration_days"])),
            difficulty_level=str(record.get("difficulty_level") or ""),
            category=str(record.get("category") or ""),
        )
    except (KeyError, TypeError, ValueError) as e:
        raise ValueError(f"Invalid tour record {record.get('id') if isinstance(record, dict) else record!r}: {e}") from e


def _extract_records(payload: Any) -> List[Any]:
    """Accept {"data": {"tours": [...]}}, {"data": [...]} or a bare list."""
    if isinstance(payload, list):
        return payload
    if isinstance(payload, dict):
        if payload.get("success") is False:
            raise CatalogError(f"Catalog API reported failure: {payload.get('message', 'unknown error')}")
        data = payload.get("data")
        if isinstance(data, list):
            return data
        if isinstance(data, dict) and isinstance(data.get("tours"), list):
            return data["tours"]
    raise CatalogError("Unexpected catalog payload shape")


class CatalogClient:
    """Fetches the tour catalog over HTTP."""

    def __init__(
        self,
        base_url: str = CATALOG_API_URL,
        timeout: float = CATALOG_TIMEOUT_SECONDS,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        """
        Initialize the catalog client.

        Args:
            base_url: Base URL of the booking API (tours.php lives under it)
            timeout: Request timeout in seconds
            transport: Optional httpx transport (tests use httpx.MockTransport)
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.transport = transport
        logger.info(f"Initialized CatalogClient for {self.base_url}")

    async def fetch_catalog(self) -> List[TourRecord]:
        """
        Fetch every tour from the catalog.

        Returns:
            List of tours; records that fail to parse are skipped

        Raises:
            CatalogError: On network, HTTP status or payload errors
        """
        url = f"{self.base_url}/tours.php"
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.get(url)
                response.raise_for_status()
                payload = response.json()
        except httpx.HTTPStatusError as e:
            raise CatalogError(f"Catalog API returned {e.response.status_code}") from e
        except httpx.HTTPError as e:
            raise CatalogError(f"Catalog request failed: {e}") from e
        except ValueError as e:
            raise CatalogError(f"Catalog response is not valid JSON: {e}") from e

        tours = []
        for record in _extract_records(payload):
            try:
                tours.append(parse_tour(record))
            except ValueError as e:
                logger.warning(f"Skipping tour record: {e}")

        logger.info(f"Fetched {len(tours)} tours from catalog")
        return tours


class TourCatalog:
    """
    Last successfully fetched catalog snapshot.

    Readers always get a list; until the first successful refresh it is empty.
    """

    def __init__(self, client: Optional[CatalogClient] = None, tours: Optional[List[TourRecord]] = None):
        self.client = client
        self._tours: List[TourRecord] = list(tours or [])

    @property
    def tours(self) -> List[TourRecord]:
        return list(self._tours)

    async def refresh(self) -> List[TourRecord]:
        """Refetch the catalog; on failure keep the previous snapshot."""
        if self.client is None:
            return self.tours

        try:
            self._tours = await self.client.fetch_catalog()
        except CatalogError as e:
            logger.error(f"Catalog refresh failed, keeping {len(self._tours)} cached tours: {e}")
        return self.tours
