import logging
from typing import Optional

from .errors import InvalidArgument
from .transport import TransportHandle, header_length

logger = logging.getLogger(__name__)

BASE_URL = "https://api.zotero.org"

# Version 3 is the current and recommended version of the Zotero web API
ZOTERO_API_VERSION = 3


class ZoteroApiRequest:
    """Requests the Zotero web API, one path at a time.

    Usage::

        req = ZoteroApiRequest().set_api_key(key).initialize("/users/123/items")
        body = req.execute()
        if body is None:
            print(req.get_handle().strerror())

    See https://www.zotero.org/support/dev/web_api/v3/basics
    """

    def __init__(self, api_key: Optional[str] = None, timeout: Optional[float] = None):
        self.api_key = api_key
        self.timeout = timeout
        self.handle: Optional[TransportHandle] = None
        self.response_header = ""

    @classmethod
    def from_settings(cls, settings) -> "ZoteroApiRequest":
        return cls(api_key=settings.api_key, timeout=settings.timeout)

    def set_api_key(self, api_key: Optional[str]) -> "ZoteroApiRequest":
        """Keys are created in the Zotero account settings.

        Not needed for read access to public libraries.
        """
        self.api_key = api_key
        return self

    def _new_handle(self) -> TransportHandle:
        return TransportHandle()

    def initialize(self, path: str) -> "ZoteroApiRequest":
        # Only catches careless mistakes, not a URI validator
        if not path.startswith("/"):
            raise InvalidArgument(f"path must start with '/': {path!r}")

        # Left open by a failed execute() for error inspection
        if self.handle is not None and not self.handle.closed:
            logger.debug("closing stale handle for %s", self.handle.url)
            self.handle.close()

        self.handle = self._new_handle()
        self.response_header = ""

        headers = [f"Zotero-API-Version: {ZOTERO_API_VERSION}"]
        if self.api_key is not None:
            headers.append(f"Zotero-API-Key: {self.api_key}")

        self.handle.setopt("url", BASE_URL + path)
        self.handle.setopt("http_header", headers)
        self.handle.setopt("return_transfer", True)
        self.handle.setopt("header_function", self._response_header_callback)
        if self.timeout is not None:
            self.handle.setopt("timeout", self.timeout)

        return self

    def execute(self) -> Optional[str]:
        """Returns the response body, or None if the transfer failed.

        The handle is closed on success only, so a failed transfer can still
        be inspected through get_handle().
        """
        if self.handle is None:
            raise RuntimeError("execute() called before initialize()")

        body = self.handle.perform()
        if body is not None:
            self.handle.close()
        return body

    def get_response_header(self) -> str:
        return self.response_header

    def get_handle(self) -> Optional[TransportHandle]:
        return self.handle

    def set_handle(self, handle: TransportHandle) -> None:
        """Swap the handle between initialize() and execute()."""
        self.handle = handle

    def _response_header_callback(self, handle, line: str) -> int:
        self.response_header += line
        return header_length(line)
