"""HTTP transport backed by ``httpx.AsyncClient``."""

from typing import Any, Dict, Optional
import httpx
import structlog

from .base import Transport, TransportError
from .types import RawResult, SourceFormat, TransportRequest

logger = structlog.get_logger("http_transport")


def accept_header(source_format: SourceFormat) -> str:
    """Default ``Accept`` header for a source format."""
    if source_format in (SourceFormat.XML, SourceFormat.SOAP):
        return "application/xml, text/xml"
    if source_format == SourceFormat.CSV:
        return "text/csv"
    return "application/json"


def _response_body(response: httpx.Response) -> Any:
    """Parse JSON responses; everything else is returned as text."""
    content_type = response.headers.get("content-type", "")
    if "json" in content_type and response.content:
        try:
            return response.json()
        except ValueError:
            logger.debug("Response declared JSON but did not parse", url=str(response.url))
    return response.text


class HttpxTransport(Transport):
    """Transport issuing requests through a shared ``httpx.AsyncClient``."""

    def __init__(
        self,
        timeout_ms: int = 30000,
        accept: str = "application/json",
        client: Optional[httpx.AsyncClient] = None
    ):
        """Create the transport.

        Parameters
        - timeout_ms: Per-request timeout in milliseconds
        - accept: Default ``Accept`` header sent with every request
        - client: Preconfigured client (e.g. with ``httpx.MockTransport``)
        """
        self.client = client or httpx.AsyncClient(
            timeout=timeout_ms / 1000.0,
            headers={"Accept": accept}
        )

    async def send(self, request: TransportRequest) -> RawResult:
        kwargs: Dict[str, Any] = {
            "headers": request.headers or None,
            "params": request.query_params or None,
        }
        if request.body is not None:
            if isinstance(request.body, (str, bytes)):
                kwargs["content"] = request.body
            else:
                kwargs["json"] = request.body

        try:
            response = await self.client.request(request.method, request.url, **kwargs)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise TransportError(
                f"Request failed with status code {e.response.status_code}",
                status_code=e.response.status_code
            ) from e
        except httpx.HTTPError as e:
            raise TransportError(f"{type(e).__name__}: {e}") from e

        return RawResult(
            body=_response_body(response),
            status_code=response.status_code,
            headers=dict(response.headers)
        )

    async def head(self, url: str) -> RawResult:
        return await self.send(TransportRequest(method="HEAD", url=url))

    async def aclose(self) -> None:
        await self.client.aclose()
