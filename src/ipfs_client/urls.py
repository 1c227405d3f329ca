"""
Request URL construction for the daemon's RPC API.
"""

from typing import Callable

from .http_primitives import QueryParams

CONTROL_PARAMS = "stream-channels=true&json=true&encoding=json"


def build_url(
    prefix: str,
    path: str,
    params: QueryParams = (),
    timeout: str = "",
    encode: Callable[[str], str] = str,
) -> str:
    """
    Build the URL for one endpoint call.

    Args:
        prefix: Base URL including the API path, e.g. "http://localhost:5001/api/v0"
        path: Endpoint path without a leading slash, e.g. "pin/add"
        params: Ordered (name, value) pairs; repeated names are kept
        timeout: Server-side timeout; appended last when non-empty
        encode: Percent-encoder applied to every name and value

    Returns:
        The full request URL
    """
    parts = [f"{prefix}/{path}?{CONTROL_PARAMS}"]

    all_params = list(params)
    if timeout:
        all_params.append(("timeout", timeout))

    for name, value in all_params:
        parts.append(f"&{encode(name)}={encode(value)}")

    return "".join(parts)
