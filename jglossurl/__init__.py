"""
jglossurl - Forwarding URLs for the JGloss-WWW servlet.

Embeds a target URL as a single path segment of a servlet URL and recovers it:
- '_' escape codec safe against servers that unescape '%' in paths
- Forwarding URL composition and decomposition with cookie and form data flags
- Servlet path info parsing and forwarding policy
- Link rewriting for forwarded HTML documents
"""

__version__ = "1.0.0"

# Escape codec
from jglossurl.codec import hex_to_bin, bin_to_hex, escape_url, unescape_url, is_safe_char

# Forwarding URLs
from jglossurl.forwarding import (
    ForwardingFlags,
    ForwardingRequest,
    Conversion,
    to_jgloss_url,
    to_base_url,
    extract_flags,
    parse_encoded_path,
    default_servlet_url,
    base_to_jgloss,
    jgloss_to_base,
)

# Servlet side
from jglossurl.rewriter import URLRewriter
from jglossurl.html_links import rewrite_links
from jglossurl.policy import ForwardingPolicy, ForwardingDecision, ForwardingRejected

__all__ = [
    # Codec
    "hex_to_bin",
    "bin_to_hex",
    "escape_url",
    "unescape_url",
    "is_safe_char",
    # Forwarding
    "ForwardingFlags",
    "ForwardingRequest",
    "Conversion",
    "to_jgloss_url",
    "to_base_url",
    "extract_flags",
    "parse_encoded_path",
    "default_servlet_url",
    "base_to_jgloss",
    "jgloss_to_base",
    # Servlet side
    "URLRewriter",
    "rewrite_links",
    "ForwardingPolicy",
    "ForwardingDecision",
    "ForwardingRejected",
    # Meta
    "__version__",
]
