# backoffice/mls/client.py
"""
HTTP side of the MLS proxy: one outbound GET per inbound call.

  - search(): list query built by mls.query, normalized to a ListingPage
  - get()   : single record by listing key, returned as-is

No retries, no caching; each call opens its own AsyncClient so list and
detail fetches share no state. Credentials come from the injected Settings.
"""
import logging
from typing import Any, Dict, Optional, Sequence, Tuple
from urllib.parse import quote as urlquote, urlencode

import httpx

from backoffice.config import Settings
from backoffice.mls.query import PAGE_SIZE, build_query, quote, total_pages
from backoffice.models import ListingPage, ListingQueryParams

LOG = logging.getLogger("mls")

# keep OData punctuation readable on the wire; spaces go out as %20
_SAFE = "$'(),"


class MLSError(Exception):
    """Upstream failure, already shaped for the caller."""

    def __init__(self, error: str, details: Any = None, status_code: Optional[int] = None):
        super().__init__(error)
        self.error = error
        self.details = details
        self.status_code = status_code or 500

    def to_dict(self) -> Dict[str, Any]:
        return {"error": self.error, "details": self.details}


def encode_query(params: Sequence[Tuple[str, str]]) -> str:
    return urlencode(list(params), quote_via=urlquote, safe=_SAFE)


class MLSClient:

    def __init__(self, settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.base_url = settings.mls_api_url
        self._token = settings.mls_access_token
        self._transport = transport

    def _headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self._token}",
            "Accept": "application/json",
        }

    async def _get(self, url: str) -> httpx.Response:
        async with httpx.AsyncClient(transport=self._transport) as client:
            resp = await client.get(url, headers=self._headers())
        resp.raise_for_status()
        return resp

    async def search(self, params: ListingQueryParams) -> ListingPage:
        query = build_query(params)
        url = f"{self.base_url}?{encode_query(query.params)}"
        LOG.info("MLS API request: %s?%s", self.base_url, query.render())

        try:
            data = (await self._get(url)).json()
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            LOG.error("MLS API error: status=%s body=%s", status, e.response.text[:500])
            raise MLSError("Failed to fetch MLS data",
                           details=f"MLS API responded with HTTP {status}",
                           status_code=status) from e
        except httpx.HTTPError as e:
            LOG.error("MLS API transport error: %s", e)
            raise MLSError("Failed to fetch MLS data", details=str(e) or type(e).__name__) from e
        except ValueError as e:
            LOG.error("MLS API returned a non-JSON body: %s", e)
            raise MLSError("Failed to fetch MLS data",
                           details="Invalid response format from MLS API") from e

        items = data.get("value") if isinstance(data, dict) else None
        if not isinstance(items, list):
            LOG.error("MLS API response has no 'value' array (keys=%s)",
                      sorted(data) if isinstance(data, dict) else type(data).__name__)
            raise MLSError("Failed to fetch MLS data",
                           details="Invalid response format from MLS API")

        count = data.get("@odata.count")
        if count is not None and (isinstance(count, bool) or not isinstance(count, int) or count < 0):
            LOG.error("MLS API response has an unusable @odata.count: %r", count)
            raise MLSError("Failed to fetch MLS data",
                           details="Invalid response format from MLS API")

        total = count or len(items)
        LOG.info("MLS API response: total=%s returned=%s", total, len(items))

        return ListingPage(
            properties=items,
            total=total,
            page=query.page,
            page_size=PAGE_SIZE,
            total_pages=total_pages(total),
        )

    async def get(self, listing_key: str) -> Any:
        # full record, no $select
        url = self.base_url + urlquote(f"({quote(listing_key)})", safe=_SAFE)
        LOG.info("MLS API request: %s", url)

        try:
            resp = await self._get(url)
            return resp.json()
        except httpx.HTTPStatusError as e:
            details = {
                "message": f"MLS API responded with HTTP {e.response.status_code}",
                "status": e.response.status_code,
                "statusText": e.response.reason_phrase,
                "data": _body(e.response),
                "url": url,
            }
            LOG.error("MLS API error: %s", details)
            raise MLSError("Failed to fetch property details", details=details,
                           status_code=e.response.status_code) from e
        except httpx.HTTPError as e:
            details = {"message": str(e) or type(e).__name__, "url": url}
            LOG.error("MLS API transport error: %s", details)
            raise MLSError("Failed to fetch property details", details=details) from e
        except ValueError as e:
            details = {"message": "Invalid response format from MLS API", "url": url}
            LOG.error("MLS API returned a non-JSON body for %s: %s", url, e)
            raise MLSError("Failed to fetch property details", details=details) from e


def _body(resp: httpx.Response) -> Any:
    try:
        return resp.json()
    except ValueError:
        return resp.text
