"""
Forwarding policy of the servlet.

Decides whether a decoded forwarding request may be served and which of the
forwarding flags requested by the URL are actually honoured.
"""

import logging
from dataclasses import dataclass, field
from urllib.parse import urlparse

from jglossurl.forwarding import ForwardingRequest

logger = logging.getLogger(__name__)

HTTP_PROTOCOLS = ("http", "https")


class ForwardingRejected(Exception):
    """A forwarding request which must not be served."""

    def __init__(self, status_code: int, message: str):
        super().__init__(message)
        self.status_code = status_code
        self.message = message


@dataclass(frozen=True)
class ForwardingDecision:
    """What to fetch and what to pass along with it."""
    url: str
    protocol: str
    forward_cookies: bool = False
    forward_form_data: bool = False


def parse_protocols(value: str) -> list[str]:
    """Split a ':' separated protocol list, e.g. 'http:https:ftp'."""
    protocols = [p.strip().lower() for p in value.split(":") if p.strip()]
    if not protocols:
        raise ValueError("No allowed protocols configured")
    return protocols


@dataclass
class ForwardingPolicy:
    """Servlet-wide forwarding settings."""
    allowed_protocols: list[str] = field(default_factory=lambda: list(HTTP_PROTOCOLS))
    enable_cookie_forwarding: bool = False
    enable_secure_insecure_cookie_forwarding: bool = False
    enable_form_data_forwarding: bool = False
    enable_secure_insecure_form_data_forwarding: bool = False

    def describe(self):
        """Log the effective settings."""
        logger.info("Allowed protocols: %s", ", ".join(self.allowed_protocols))
        logger.info("Cookie forwarding %s", "enabled" if self.enable_cookie_forwarding else "disabled")
        logger.info("Secure-to-insecure cookie forwarding %s",
                    "enabled" if self.enable_secure_insecure_cookie_forwarding else "disabled")
        logger.info("Form data forwarding %s", "enabled" if self.enable_form_data_forwarding else "disabled")
        logger.info("Secure-to-insecure form data forwarding %s",
                    "enabled" if self.enable_secure_insecure_form_data_forwarding else "disabled")

    def resolve(
        self,
        request: ForwardingRequest,
        servlet_path: str,
        secure_request: bool = False,
        query: str | None = None,
    ) -> ForwardingDecision:
        """
        Check a forwarding request against this policy.

        Args:
            request: Decoded path info of the call.
            servlet_path: Path of the servlet, used to refuse forwarding to itself.
            secure_request: True if the call to the servlet came in over https.
            query: Query string of the call, appended to the target when form
                data is forwarded (GET forms submit their fields this way).

        Raises:
            ForwardingRejected: 403 if the target is the servlet itself or
                uses a disallowed protocol, 400 if it is not a usable URL.
        """
        url = request.url

        # don't allow the servlet to call itself
        if servlet_path and servlet_path.lower() in url.lower():
            raise ForwardingRejected(403, f"Address not allowed: {url}")

        if ":" not in url and "http" in self.allowed_protocols:
            url = "http://" + url

        try:
            parsed = urlparse(url)
        except ValueError as e:
            raise ForwardingRejected(400, f"Malformed URL: {url}") from e
        if not parsed.scheme:
            raise ForwardingRejected(400, f"Malformed URL: {url}")

        protocol = parsed.scheme.lower()
        if protocol not in self.allowed_protocols:
            raise ForwardingRejected(403, f"Protocol not allowed: {protocol}")

        is_http = protocol in HTTP_PROTOCOLS
        if is_http and not parsed.netloc:
            raise ForwardingRejected(400, f"Malformed URL: {url}")

        target_secure = protocol == "https"

        forward_cookies = (
            is_http
            and self.enable_cookie_forwarding
            and request.forward_cookies
            and (self.enable_secure_insecure_cookie_forwarding or not target_secure or secure_request)
        )
        forward_form_data = (
            is_http
            and self.enable_form_data_forwarding
            and request.forward_form_data
            and (self.enable_secure_insecure_form_data_forwarding or not secure_request or target_secure)
        )

        if forward_form_data and query:
            url += ("&" if parsed.query else "?") + query

        return ForwardingDecision(
            url=url,
            protocol=protocol,
            forward_cookies=forward_cookies,
            forward_form_data=forward_form_data,
        )
