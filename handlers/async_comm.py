"""Asynchronous HTTP client used by the translation engines.

The `AsyncHttp` class wraps an aiohttp session, applies connect/total timeouts and decodes
responses by content type. Transport problems are converted into the `AsyncCommError` family
so the engines only have to translate one hierarchy into translation errors.
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any, Final, Literal, Self

import aiohttp
from aiohttp.client import ClientSession

from utils.logger_utils import LoggerUtils

if TYPE_CHECKING:
    import logging
    from collections.abc import Callable

    from aiohttp.client import ClientResponse


__all__: list[str] = [
    "AsyncCommError",
    "AsyncCommInvalidContentTypeError",
    "AsyncCommTimeoutError",
    "AsyncHttp",
]

logger: logging.Logger = LoggerUtils.get_logger(__name__)

HTTPMethod = Literal["GET", "POST"]

CONNECT_TIMEOUT: Final[float] = 1.0


class AsyncHttp:
    """Asynchronous HTTP client for JSON APIs.

    The aiohttp session is created on first use so that it is always bound to the running event loop.
    Responses are decoded by their ``Content-Type`` through registered handlers.
    """

    def __init__(self, *, headers: dict[str, str] | None = None) -> None:
        self.__session: ClientSession | None = None
        self._headers: dict[str, str] = dict(headers or {})
        self.content_handlers: dict[str, Callable[[bytes], Any]] = {}
        self.add_handler("text/plain", lambda x: x.decode("utf-8"))
        self.add_handler("application/json", lambda x: json.loads(x.decode("utf-8")))

    async def __aenter__(self) -> Self:
        self.initialize_session()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        _ = exc_type, exc_val, exc_tb
        await self.close()

    def initialize_session(self) -> None:
        """Create the aiohttp session if there is no open one.

        Must be called from a coroutine running on the event loop that will use the session.
        """
        if self.__session is None or self.__session.closed:
            self.__session = ClientSession(headers=self._headers)
            logger.debug("%s session initialized", self.__class__.__name__)

    @property
    def session(self) -> ClientSession:
        """Get the open aiohttp session, creating it when needed."""
        self.initialize_session()
        if self.__session is None:
            msg = "Session could not be initialized"
            raise RuntimeError(msg)
        return self.__session

    @property
    def is_open(self) -> bool:
        return self.__session is not None and not self.__session.closed

    async def close(self) -> None:
        """Close the aiohttp session if it is open."""
        if self.__session is not None and not self.__session.closed:
            await self.__session.close()
            logger.debug("%s session closed", self.__class__.__name__)
        self.__session = None

    async def get(self, *, url: str, params: dict[str, str] | None = None, total_timeout: float = 10.0) -> Any:
        """Perform a GET request and return the decoded body."""
        return await self._request("GET", url=url, params=params, total_timeout=total_timeout)

    async def post_json(
        self,
        *,
        url: str,
        payload: Any,
        params: dict[str, str] | None = None,
        total_timeout: float = 10.0,
    ) -> Any:
        """POST ``payload`` as a JSON body and return the decoded response.

        Args:
            url (str): Request URL.
            payload (Any): JSON-serializable request body.
            params (dict[str, str] | None): Optional query parameters.
            total_timeout (float): Total timeout in seconds. Zero or negative disables it.

        Returns:
            Any: Decoded response body (dict/list for JSON, str for text, None when empty).

        Raises:
            AsyncCommTimeoutError: If the server does not answer in time.
            AsyncCommError: On connection failures and non-success status codes.
            AsyncCommInvalidContentTypeError: If the body cannot be decoded.
        """
        return await self._request("POST", url=url, params=params, json=payload, total_timeout=total_timeout)

    async def decode_response(self, resp: ClientResponse) -> Any:
        """Decode the response body with the handler registered for its content type.

        Raises:
            AsyncCommInvalidContentTypeError: If no handler matches or the body is malformed.
        """
        content_type: str = resp.headers.get("Content-Type", "").split(";")[0].strip()
        raw: bytes = await resp.read()
        if not raw:
            logger.debug("Received empty response")
            return None

        handler: Callable[[bytes], Any] | None = self.content_handlers.get(content_type)
        if handler is None:
            msg: str = f"Unknown Content-Type '{content_type}'"
            raise AsyncCommInvalidContentTypeError(msg)
        try:
            return handler(raw)
        except (UnicodeDecodeError, json.JSONDecodeError) as err:
            msg = f"Malformed '{content_type}' body: {err}"
            raise AsyncCommInvalidContentTypeError(msg) from err

    def add_handler(self, content_type: str, handler: Callable[[bytes], Any]) -> None:
        """Register a decoder for a content type, replacing any existing one."""
        if content_type in self.content_handlers:
            logger.debug("Handler for content type '%s' already exists, replacing it", content_type)
        self.content_handlers[content_type] = handler

    @staticmethod
    def _build_timeout(total_timeout: float) -> aiohttp.ClientTimeout:
        if total_timeout <= 0:
            return aiohttp.ClientTimeout(total=None)
        if total_timeout < CONNECT_TIMEOUT:
            return aiohttp.ClientTimeout(total=total_timeout)
        return aiohttp.ClientTimeout(connect=CONNECT_TIMEOUT, total=total_timeout)

    async def _request(self, method: HTTPMethod, *, url: str, total_timeout: float, **kwargs: Any) -> Any:
        logger.debug("[%s] url=%s timeout=%s", method, url, total_timeout)
        try:
            async with self.session.request(
                method=method,
                url=url,
                timeout=self._build_timeout(total_timeout),
                **kwargs,
            ) as resp:
                if resp.status >= 400:  # noqa: PLR2004
                    body: str = await resp.text(errors="replace")
                    msg = "Error response from the server"
                    raise AsyncCommError(msg, status=resp.status, body=body)
                return await self.decode_response(resp)

        except TimeoutError as err:
            logger.debug(err)
            msg = "Timeout due to a lack of response from the server."
            raise AsyncCommTimeoutError(msg) from err
        except aiohttp.ClientConnectorError as err:
            logger.debug(err)
            msg = "The server is not running, or the port is closed."
            raise AsyncCommError(msg) from err
        except (ConnectionResetError, aiohttp.ClientError) as err:
            logger.debug(err)
            msg = "The connection to the server failed."
            raise AsyncCommError(msg) from err


class AsyncCommError(Exception):
    """Base class for asynchronous communication errors.

    Attributes:
        status (int | None): HTTP status code when the server answered with an error.
        body (str): Response body preview for error responses.
    """

    BODY_PREVIEW_LIMIT: Final[int] = 200

    def __init__(self, msg: str | BaseException, *, status: int | None = None, body: str = "") -> None:
        self.msg: str = str(msg)
        self.status: int | None = status
        self.body: str = body[: self.BODY_PREVIEW_LIMIT]
        if status is not None:
            self.msg = f"{self.msg}: status='{status}'"
        super().__init__(self.msg)


class AsyncCommTimeoutError(AsyncCommError):
    """An HTTP request did not complete within its timeout."""


class AsyncCommInvalidContentTypeError(AsyncCommError):
    """A response could not be decoded for its content type."""
