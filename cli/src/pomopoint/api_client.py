"""httpx client for commands that talk to a running pomopoint API."""

import sys

import httpx

from pomopoint.config import get_api_url, get_cli_user_id


def api_request(method: str, path: str, **kwargs) -> httpx.Response:
    """Call ``path`` on the API as the CLI user.

    Exits with status 1 when the API is unreachable; HTTP errors raise.
    """
    base_url = get_api_url()
    headers = {"X-User-Id": get_cli_user_id()}

    try:
        resp = httpx.request(method, f"{base_url}{path}", headers=headers, timeout=30, **kwargs)
    except httpx.ConnectError:
        print(f"Cannot reach the API at {base_url}. Is `pomo-api` running?", file=sys.stderr)
        sys.exit(1)

    resp.raise_for_status()
    return resp
