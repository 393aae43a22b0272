"""
Rewrites the URLs of a forwarded document so that following them goes
through the servlet again.
"""

import logging
from typing import Iterable
from urllib.parse import urljoin, urlparse

from jglossurl.codec import escape_url
from jglossurl.forwarding import forwarding_prefix

logger = logging.getLogger(__name__)

# Tags whose URLs are always routed through the servlet
FORWARDED_TAGS = frozenset({"a", "area", "frame"})


class URLRewriter:
    """
    Rewrites URLs found in one page.

    Relative URLs are made absolute against the document base. URLs which
    the user navigates to (links, image maps, frames and, when form data
    forwarding is allowed, form actions) are changed to point to the servlet,
    carrying this rewriter's forwarding flags.
    """

    def __init__(
        self,
        servlet_base: str,
        document_base: str,
        protocols: Iterable[str] = ("http", "https"),
        allow_cookie_forwarding: bool = False,
        allow_form_data_forwarding: bool = False,
    ):
        self.servlet_prefix = forwarding_prefix(
            servlet_base, allow_cookie_forwarding, allow_form_data_forwarding
        )
        self.protocols = frozenset(p.lower() for p in protocols)
        self.forward_form_data = allow_form_data_forwarding
        self._document_base = document_base

    @property
    def document_base(self) -> str:
        """URL relative URLs of the page are resolved against."""
        return self._document_base

    @document_base.setter
    def document_base(self, value: str):
        self._document_base = urljoin(self._document_base, value)

    def rewrite(self, url: str, tag: str | None = None, force_servlet_relative: bool = False) -> str:
        """
        Rewrite a URL.

        Args:
            url: The URL to change, absolute or relative to the document base.
            tag: Name of the tag in which the URL was found.
            force_servlet_relative: Ignore tag and protocol and always point
                the URL to the servlet.
        """
        if not url:
            return url

        if tag is not None:
            tag = tag.lower()
            if tag == "base":
                return url

        target = urljoin(self._document_base, url)

        if force_servlet_relative or (self._forwards_tag(tag) and self._allowed(target)):
            return self.servlet_prefix + escape_url(target)

        logger.debug("Not forwarding %s (tag %s)", target, tag)
        return target

    def _forwards_tag(self, tag: str | None) -> bool:
        if tag is None or tag in FORWARDED_TAGS:
            return True
        return self.forward_form_data and tag == "form"

    def _allowed(self, target: str) -> bool:
        return urlparse(target).scheme.lower() in self.protocols
