import logging
import os
import sys

from zotero_api_client.config import load_settings
from zotero_api_client.core.errors import InvalidArgument
from zotero_api_client.core.request import ZoteroApiRequest

# We look two levels up since the script is in zotero_api_client/jobs/
ENV_FILE = os.path.join(os.path.dirname(__file__), "../../.env")


def main(argv=None) -> int:
    argv = sys.argv[1:] if argv is None else argv
    if len(argv) != 1:
        print("usage: python -m zotero_api_client.jobs.run_request /users/<id>/items", file=sys.stderr)
        return 2

    logging.basicConfig(
        level=os.getenv("LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    settings = load_settings(ENV_FILE)
    req = ZoteroApiRequest.from_settings(settings)
    try:
        req.initialize(argv[0])
    except InvalidArgument as e:
        print(f"ERROR {e}", file=sys.stderr)
        return 2

    body = req.execute()
    if body is None:
        handle = req.get_handle()
        print(f"ERROR url={handle.url} errno={handle.errno} err={handle.strerror()}", file=sys.stderr)
        handle.close()
        return 1

    print(req.get_response_header(), end="")
    print(body)
    return 0


if __name__ == "__main__":
    sys.exit(main())
