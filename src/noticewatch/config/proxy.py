"""Optional forwarding proxy for sources that block foreign clients."""

from __future__ import annotations

import base64
from dataclasses import dataclass

from .env import optional_env_var


@dataclass(frozen=True, slots=True)
class ForwardProxyConfig:
    """A proxy that fetches ``<url>/<target>`` on our behalf.

    ``basic_auth`` is the raw ``user:password`` pair expected by the proxy.
    """

    url: str
    basic_auth: str

    def wrap(self, target: str) -> str:
        return f"{self.url.rstrip('/')}/{target}"

    def headers(self) -> dict[str, str]:
        token = base64.b64encode(self.basic_auth.encode("utf-8")).decode("ascii")
        return {"Authorization": f"Basic {token}"}


def get_forward_proxy_config(prefix: str) -> ForwardProxyConfig | None:
    """Read ``<prefix>_PROXY_URL`` and ``<prefix>_BASIC_AUTH``; both must be set."""

    url = optional_env_var(f"{prefix}_PROXY_URL")
    basic_auth = optional_env_var(f"{prefix}_BASIC_AUTH")
    if url is None or basic_auth is None:
        return None
    return ForwardProxyConfig(url=url, basic_auth=basic_auth)
