"""Base transport interface and adapter exceptions.

Defines the contract the adapter depends on for network access, independent
of the HTTP client used underneath, plus the error taxonomy surfaced by the
retry loop and the transformation pipeline.

All transport methods are asynchronous.
"""

from abc import ABC, abstractmethod
from typing import Optional

from .types import RawResult, TransportRequest


class Transport(ABC):
    """Abstract base class for transports.

    Implementations raise ``TransportError`` for timeouts, connection
    failures and non-success status codes; the retry loop treats all of them
    alike.
    """

    @abstractmethod
    async def send(self, request: TransportRequest) -> RawResult:
        """Perform one round trip.

        Returns
        - ``RawResult`` with the (possibly parsed) body, status and headers
        """
        pass

    @abstractmethod
    async def head(self, url: str) -> RawResult:
        """Issue a lightweight existence probe against ``url``."""
        pass

    async def aclose(self) -> None:
        """Release any underlying connections."""
        return None


class AdapterError(Exception):
    """Base exception for adapter operations."""
    pass


class TransportError(AdapterError):
    """Network, timeout or non-success status from the transport."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class DecodeError(AdapterError):
    """Source payload could not be decoded."""
    pass


class ConfigurationError(AdapterError):
    """Adapter is missing configuration required for the call."""
    pass
