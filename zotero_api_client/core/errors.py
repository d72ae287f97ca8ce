from dataclasses import dataclass
from typing import Optional


class InvalidArgument(ValueError):
    """Raised for caller mistakes caught before any network activity."""


@dataclass(frozen=True)
class TransferFailure:
    """Diagnostics left on a transport handle after a failed transfer.

    ``ZoteroApiRequest.execute`` returns ``None`` and the caller reads this
    off ``handle.error`` instead.
    """

    errno: int
    message: str
    cause: Optional[BaseException] = None
