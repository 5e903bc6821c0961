"""Request options applied to a curl easy handle."""

from __future__ import annotations

from typing import Final

from pydantic import Field

from ..types import StrictBaseModel

USER_AGENT: Final = "curlstream/0.1.0"
"""Default User-Agent header sent with every request."""

MAX_REDIRECTS: Final = 10
"""Default cap on followed redirects."""


class RequestOptions(StrictBaseModel):
    """Per-request settings forwarded to libcurl."""

    follow_redirects: bool = True
    """Follow 3xx Location headers."""

    max_redirects: int = Field(default=MAX_REDIRECTS, ge=0)
    """Maximum number of redirects to follow."""

    connect_timeout_secs: float | None = Field(default=None, gt=0)
    """Connection phase timeout. None leaves libcurl's default."""

    timeout_secs: float | None = Field(default=None, gt=0)
    """Whole-transfer timeout. None means no limit."""

    user_agent: str = USER_AGENT
    """User-Agent header value."""

    headers: dict[str, str] = Field(default_factory=dict)
    """Extra request headers."""

    verify_tls: bool = True
    """Verify the peer certificate and host name."""

    def header_lines(self) -> list[str]:
        """Render extra headers in the ``Name: value`` form libcurl expects."""
        return [f"{name}: {value}" for name, value in self.headers.items()]
