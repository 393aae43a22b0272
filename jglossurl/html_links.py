"""
Link rewriting for forwarded HTML documents.
"""

import logging

from bs4 import BeautifulSoup

from jglossurl.rewriter import URLRewriter

logger = logging.getLogger(__name__)

# tag name -> attribute holding the URL
LINK_ATTRIBUTES = {
    "a": "href",
    "area": "href",
    "img": "src",
    "frame": "src",
    "form": "action",
}


def rewrite_links(markup: str, rewriter: URLRewriter, parser: str = "lxml") -> str:
    """
    Rewrite the link-bearing attributes of an HTML document.

    A <base href> in the document replaces the rewriter's document base before
    any link is rewritten. URLs the rewriter cannot escape are left unchanged.
    """
    soup = BeautifulSoup(markup, parser)

    base = soup.find("base", href=True)
    if base is not None:
        rewriter.document_base = base["href"]
        logger.debug("Document base set to %s", rewriter.document_base)

    for tag in soup.find_all(list(LINK_ATTRIBUTES)):
        attr = LINK_ATTRIBUTES[tag.name]
        value = tag.get(attr)
        if value is None:
            continue
        try:
            tag[attr] = rewriter.rewrite(value, tag.name)
        except ValueError as e:
            logger.warning("Leaving %s %s=%r unchanged: %s", tag.name, attr, value, e)

    return str(soup)
