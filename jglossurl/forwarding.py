"""
Forwarding URL composition and decomposition.

A forwarding URL routes a document through the JGloss-WWW servlet:

    <servlet base>/<cookie flag><form data flag>/<escaped target URL>

Both flags are the digits '0' or '1'. The escaped target is always the segment
after the last '/'.
"""

import logging
from dataclasses import dataclass

from jglossurl.codec import escape_url, unescape_url

logger = logging.getLogger(__name__)

DEFAULT_SERVLET_NAME = "jgloss-www"


@dataclass(frozen=True)
class ForwardingFlags:
    """Forwarding policy bits carried by a forwarding URL."""
    forward_cookies: bool = False
    forward_form_data: bool = False

    def encode(self) -> str:
        """Flag digits as they appear in the URL, e.g. '10'."""
        return ("1" if self.forward_cookies else "0") + ("1" if self.forward_form_data else "0")


@dataclass(frozen=True)
class ForwardingRequest:
    """Decoded servlet path info."""
    forward_cookies: bool
    forward_form_data: bool
    url: str


@dataclass(frozen=True)
class Conversion:
    """Result of converting a forwarding URL back to its target."""
    base_url: str | None
    flags: ForwardingFlags | None = None


def forwarding_prefix(servlet_url: str, forward_cookies: bool, forward_form_data: bool) -> str:
    """Servlet URL plus flag segment, ready for an escaped payload to be appended."""
    out = servlet_url
    if not out.endswith("/"):
        out += "/"
    return out + ForwardingFlags(forward_cookies, forward_form_data).encode() + "/"


def to_jgloss_url(url: str, servlet_url: str, forward_cookies: bool, forward_form_data: bool) -> str:
    """
    Convert a URL pointing to a document to a URL which forwards the
    document through a JGloss-WWW servlet.

    Args:
        url: The target URL.
        servlet_url: URL pointing to the location of the JGloss-WWW servlet.
        forward_cookies: True if cookies should be forwarded by the servlet.
        forward_form_data: True if form data should be forwarded by the servlet.
    """
    return forwarding_prefix(servlet_url, forward_cookies, forward_form_data) + escape_url(url)


def to_base_url(url: str) -> str | None:
    """
    Convert a forwarding URL back to the original URL.

    Returns None if the URL has no '/' and so cannot be a forwarding URL.
    """
    i = url.rfind("/")
    if i == -1:
        logger.debug("No path separator in %r", url)
        return None
    return unescape_url(url[i + 1:])


def extract_flags(url: str) -> ForwardingFlags | None:
    """Read the two flag digits preceding the last '/' of a forwarding URL.

    Returns None when the separator sits at index 2 or lower, leaving no room
    for the flags.
    """
    i = url.rfind("/")
    if i <= 2:
        return None
    return ForwardingFlags(
        forward_cookies=url[i - 2] == "1",
        forward_form_data=url[i - 1] == "1",
    )


def parse_encoded_path(path: str) -> ForwardingRequest | None:
    """
    Parse the path info part of a call to the servlet.

    The path includes the leading '/', e.g. '/10/http_3a_2f_2fx.com'. Returns
    None if the path is not in the expected format.
    """
    # the target URL must have length at least one
    if len(path) < 5 or path[3] != "/":
        logger.debug("Malformed forwarding path %r", path)
        return None

    return ForwardingRequest(
        forward_cookies=path[1] == "1",
        forward_form_data=path[2] == "1",
        url=unescape_url(path[4:]),
    )


def default_servlet_url(page_url: str, servlet_name: str = DEFAULT_SERVLET_NAME) -> str:
    """Servlet URL next to the page at page_url."""
    return page_url[:page_url.rfind("/") + 1] + servlet_name


def base_to_jgloss(
    base_url: str,
    page_url: str,
    forward_cookies: bool = False,
    forward_form_data: bool = False,
    servlet_name: str = DEFAULT_SERVLET_NAME,
) -> str:
    """Forwarding URL for base_url through the servlet living next to page_url."""
    return to_jgloss_url(
        base_url,
        default_servlet_url(page_url, servlet_name),
        forward_cookies,
        forward_form_data,
    )


def jgloss_to_base(url: str) -> Conversion:
    """Target URL and flags of a forwarding URL."""
    return Conversion(base_url=to_base_url(url), flags=extract_flags(url))
