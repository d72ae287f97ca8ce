import logging
import math
from typing import Callable, Optional

import requests

from .errors import InvalidArgument, TransferFailure

logger = logging.getLogger(__name__)

DEFAULT_HEADERS = {
    "User-Agent": "zotero-api-client/0.1 (+https://www.zotero.org/support/dev/web_api/v3/start)"
}

# Header lines are measured in bytes, the way http.client decoded them.
HEADER_ENCODING = "iso-8859-1"

# curl-compatible error numbers
E_OK = 0
E_URL_MALFORMAT = 3
E_COULDNT_CONNECT = 7
E_WRITE_ERROR = 23
E_OPERATION_TIMEDOUT = 28
E_TOO_MANY_REDIRECTS = 47
E_RECV_ERROR = 56

ERROR_STRINGS = {
    E_OK: "No error",
    E_URL_MALFORMAT: "URL using bad/illegal format or missing URL",
    E_COULDNT_CONNECT: "Couldn't connect to server",
    E_WRITE_ERROR: "Failed writing received data to disk/application",
    E_OPERATION_TIMEDOUT: "Timeout was reached",
    E_TOO_MANY_REDIRECTS: "Number of redirects hit maximum amount",
    E_RECV_ERROR: "Failure when receiving data from the peer",
}

HeaderFunction = Callable[["TransportHandle", str], int]

OPTIONS = ("url", "http_header", "return_transfer", "header_function", "timeout", "follow_location")


def header_length(line: str) -> int:
    return len(line.encode(HEADER_ENCODING, errors="replace"))


def check_timeout(value) -> Optional[float]:
    if value is None:
        return None
    try:
        seconds = float(value)
    except (TypeError, ValueError):
        raise InvalidArgument(f"timeout is not a number: {value!r}") from None
    # urllib3 rejects zero and negative timeouts; nan and inf never expire
    if not math.isfinite(seconds) or seconds <= 0:
        raise InvalidArgument(f"timeout must be a positive number of seconds: {value!r}")
    return seconds


def _errno_for(exc: requests.RequestException) -> int:
    # ConnectTimeout is both a Timeout and a ConnectionError
    if isinstance(exc, requests.Timeout):
        return E_OPERATION_TIMEDOUT
    if isinstance(exc, requests.TooManyRedirects):
        return E_TOO_MANY_REDIRECTS
    if isinstance(exc, (requests.exceptions.MissingSchema, requests.exceptions.InvalidSchema,
                        requests.exceptions.InvalidURL)):
        return E_URL_MALFORMAT
    if isinstance(exc, requests.ConnectionError):
        return E_COULDNT_CONNECT
    return E_RECV_ERROR


def _status_line(response: requests.Response) -> str:
    version = getattr(response.raw, "version", None) or 11
    if version == 20:
        proto = "HTTP/2"
    else:
        proto = f"HTTP/{version // 10}.{version % 10}"
    reason = f" {response.reason}" if response.reason else ""
    return f"{proto} {response.status_code}{reason}\r\n"


def _header_lines(response: requests.Response):
    yield _status_line(response)
    # urllib3 keeps repeated headers (Link, Set-Cookie) apart; requests folds them
    raw_headers = getattr(response.raw, "headers", None)
    items = raw_headers.items() if raw_headers is not None else response.headers.items()
    for name, value in items:
        yield f"{name}: {value}\r\n"
    yield "\r\n"


class _HeaderCallbackAborted(Exception):
    def __init__(self, consumed, expected):
        super().__init__(f"header callback consumed {consumed} of {expected} bytes")


class TransportHandle:
    """One blocking HTTP transfer, configured option by option.

    Behaves like a curl easy handle: options are set before ``perform``,
    ``perform`` returns the body or ``None``, and diagnostics stay readable
    on the handle until it is closed.
    """

    def __init__(self, session: Optional[requests.Session] = None):
        self.session = session or requests.Session()
        self.session.headers.update(DEFAULT_HEADERS)

        self.url: Optional[str] = None
        self.http_header: list[str] = []
        self.return_transfer = False
        self.header_function: Optional[HeaderFunction] = None
        self.timeout: Optional[float] = None
        self.follow_location = False

        self.error: Optional[TransferFailure] = None
        self.status_code: Optional[int] = None
        self.effective_url: Optional[str] = None
        self.closed = False

    def setopt(self, name: str, value) -> "TransportHandle":
        if name not in OPTIONS:
            raise InvalidArgument(f"unknown transport option: {name!r}")
        if name == "http_header":
            value = list(value)
        elif name == "timeout":
            value = check_timeout(value)
        setattr(self, name, value)
        return self

    def getinfo(self, name: str):
        if name == "errno":
            return self.errno
        if name in ("status_code", "effective_url", "error"):
            return getattr(self, name)
        raise InvalidArgument(f"unknown transport info: {name!r}")

    @property
    def errno(self) -> int:
        return self.error.errno if self.error else E_OK

    def strerror(self) -> str:
        if self.error is None:
            return ERROR_STRINGS[E_OK]
        return self.error.message

    def _request_headers(self) -> dict[str, str]:
        headers = {}
        for line in self.http_header:
            name, sep, value = line.partition(":")
            if not sep:
                raise InvalidArgument(f"header line without colon: {line!r}")
            headers[name.strip()] = value.strip()
        return headers

    def _fail(self, errno: int, detail: str, cause=None) -> None:
        message = f"{ERROR_STRINGS.get(errno, 'Transfer failed')}: {detail}"
        self.error = TransferFailure(errno=errno, message=message, cause=cause)
        logger.warning("transfer to %s failed (errno=%s): %s", self.url, errno, detail)

    def perform(self) -> Optional[str]:
        if self.closed:
            raise RuntimeError("transport handle is closed")
        if not self.url:
            self._fail(E_URL_MALFORMAT, "no URL set")
            return None

        self.error = None
        self.status_code = None
        self.effective_url = None

        logger.debug("GET %s", self.url)
        try:
            headers = self._request_headers()
            r = self.session.get(
                self.url,
                headers=headers,
                timeout=self.timeout,
                allow_redirects=self.follow_location,
                stream=True,
            )
        except requests.RequestException as e:
            self._fail(_errno_for(e), str(e), e)
            return None

        try:
            self.status_code = r.status_code
            self.effective_url = r.url

            if self.header_function is not None:
                for line in _header_lines(r):
                    expected = header_length(line)
                    consumed = self.header_function(self, line)
                    if consumed != expected:
                        raise _HeaderCallbackAborted(consumed, expected)

            body = r.text if self.return_transfer else ""
        except _HeaderCallbackAborted as e:
            self._fail(E_WRITE_ERROR, str(e), e)
            return None
        except requests.RequestException as e:
            self._fail(_errno_for(e), str(e), e)
            return None
        finally:
            r.close()

        logger.debug("GET %s -> %s (%d chars)", self.url, self.status_code, len(body))
        return body

    def close(self) -> None:
        if self.closed:
            return
        self.session.close()
        self.closed = True
