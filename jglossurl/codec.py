"""
Escaping codec for forwarding URLs.

The target URL is embedded as a single path segment. Because the web server
may or may not unescape the path before passing it on, the standard '%'
mechanism cannot be used; '_' is the escape marker instead:

    escape_url("a b/c")  ->  "a_20b_2fc"

Only ISO-8859-1 text (code points 0-255) can be escaped.
"""

ESCAPE_MARKER = "_"

# '_' is missing on purpose: it is the escape marker
UNRESERVED_MARKS = frozenset("-.!~*'()")


def hex_to_bin(hex_pair: str) -> int:
    """Decode a two character hex pair into a byte value.

    Lowercase digits only. There is no validation: an uppercase letter is
    decoded as if it were a digit, so ``hex_to_bin("1F")`` is 38 and not 31.
    """
    hi = ord(hex_pair[0])
    hi -= 87 if hi >= 97 else 48
    lo = ord(hex_pair[1])
    lo -= 87 if lo >= 97 else 48
    return hi * 16 + lo


def bin_to_hex(value: int) -> str:
    """Encode a byte value as a lowercase two character hex pair.

    Values outside 0-255 produce characters outside the hex alphabet.
    """
    hi = value // 16
    hi += 87 if hi >= 10 else 48
    lo = value % 16
    lo += 87 if lo >= 10 else 48
    return chr(hi) + chr(lo)


def is_safe_char(c: str) -> bool:
    """Check if a character can appear unescaped in an escaped URL."""
    if "a" <= c <= "z" or "A" <= c <= "Z" or "0" <= c <= "9":
        return True
    return c in UNRESERVED_MARKS


def escape_url(url: str) -> str:
    """Escape a string so that it can be used as one URL path segment.

    Raises ValueError for characters above U+00FF, which have no two digit
    escape.
    """
    out = []
    for i, c in enumerate(url):
        if is_safe_char(c):
            out.append(c)
            continue

        code = ord(c)
        if code > 0xFF:
            raise ValueError(
                f"Cannot escape {c!r} (U+{code:04X}) at position {i}: "
                "only ISO-8859-1 characters are supported"
            )
        out.append(ESCAPE_MARKER + bin_to_hex(code))

    return "".join(out)


def unescape_url(url: str) -> str:
    """Unescape a string generated by escape_url().

    A marker in one of the last two positions has no room for a hex pair
    and is kept as-is. Tokens with non-hex digits are decoded by the same
    arithmetic as hex_to_bin(), truncated to 16 bits, so decoding never fails.
    """
    out = []
    i = 0
    end = len(url) - 2
    while i < len(url):
        if url[i] == ESCAPE_MARKER and i < end:
            out.append(chr(hex_to_bin(url[i + 1:i + 3]) & 0xFFFF))
            i += 3
        else:
            out.append(url[i])
            i += 1

    return "".join(out)
