import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

from .core.errors import InvalidArgument
from .core.transport import check_timeout


@dataclass(frozen=True)
class Settings:
    api_key: Optional[str] = None
    timeout: Optional[float] = None


def load_settings(env_file: Optional[str] = None) -> Settings:
    # Falls back to searching for a .env from the working directory
    load_dotenv(env_file)

    api_key = os.getenv("ZOTERO_API_KEY") or None

    raw_timeout = os.getenv("ZOTERO_TIMEOUT")
    timeout = None
    if raw_timeout:
        try:
            timeout = check_timeout(raw_timeout)
        except InvalidArgument as e:
            raise InvalidArgument(f"ZOTERO_TIMEOUT: {e}") from None

    return Settings(api_key=api_key, timeout=timeout)
