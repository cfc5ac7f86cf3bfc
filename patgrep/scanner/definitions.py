"""Category definitions: the process-wide pattern registry.

Every category is registered into ``REGISTRY`` at module load, in the order
below, and the registry is frozen before the module finishes importing.
NO pattern compilation happens per scan, per call, or lazily.

Registration order matters twice:
  1. ``list_categories()`` reports categories in this order.
  2. When two selected categories match the same span, the one registered
     first names the match. Specific shapes (keys, hashes, card numbers,
     addresses) are therefore registered before generic ones (numbers,
     words, paths, strings).

Inside a pattern, boundaries are ``\\b`` / ``\\B`` only: re2 has no lookarounds
and its ``\\b`` is ASCII. Categories that must not match inside a longer
token (Unicode words, dotted numbers) also carry a registry boundary rule,
checked by the selection layer. Card numbers and SSNs are matched on shape
alone; no checksum is verified.

IMPORT RULES:
  - ``import re2`` ONLY; ``import re`` is PROHIBITED in patgrep/scanner/.
"""

from __future__ import annotations

import re2  # noqa: F401  google-re2, never stdlib re

from patgrep.scanner.combinators import Pattern, atom, optional, repeat, sequence, union
from patgrep.scanner.registry import BOUNDARY_DOTTED, BOUNDARY_WORD, PatternRegistry

REGISTRY = PatternRegistry()


# ===========================================================================
# Building blocks (not registered)
# ===========================================================================

_HEX4 = r"[0-9A-Fa-f]{1,4}"
_OCTET = r"(?:25[0-5]|2[0-4][0-9]|1[0-9]{2}|[1-9]?[0-9])"
_IPV4_BARE = _OCTET + r"(?:\." + _OCTET + r"){3}"

_LABEL = r"[A-Za-z0-9](?:[A-Za-z0-9-]{0,61}[A-Za-z0-9])?"
_TLD = r"[A-Za-z]{2,63}"
_LOCAL_PART = r"\b[\w.%+-]+"

# RFC 3986 characters allowed in path, query and fragment (quotes, brackets
# and parentheses excluded so URLs stop at surrounding punctuation).
_URI_CHARS = r"[A-Za-z0-9\-._~%!$&*+,;=:@]"
# The last character of a URL or URI: sentence punctuation is left outside.
_URI_LAST = r"[A-Za-z0-9\-_~%$&*+=@]"
_USERINFO = r"(?:[A-Za-z0-9\-._~%!$&*+,;=:]+@)?"
_PORT = r"(?::[0-9]{1,5})?"
_PATH_ANY = r"(?:/" + _URI_CHARS + r"*)*"
_QUERY_ANY = r"(?:\?(?:" + _URI_CHARS + r"|[/?])*)?"
_PATH_LAST = r"/(?:(?:" + _URI_CHARS + r"|/)*(?:" + _URI_LAST + r"|/))?"
_QUERY_LAST = r"\?(?:(?:" + _URI_CHARS + r"|[/?])*(?:" + _URI_LAST + r"|[/?]))?"
_FRAGMENT_LAST = r"#(?:(?:" + _URI_CHARS + r"|[/?])*(?:" + _URI_LAST + r"|[/?]))?"
# Path, query and fragment, whichever comes last ending on _URI_LAST.
_URI_TAIL = optional(
    union(
        _PATH_LAST,
        _PATH_ANY + _QUERY_LAST,
        _PATH_ANY + _QUERY_ANY + _FRAGMENT_LAST,
    )
)

_FILE_CHARS = r"[A-Za-z0-9_~@%+=,\-]"
_FILE_EXT = r"(?:\.[A-Za-z0-9_\-]+)+"
_SEGMENT = r"\.?" + _FILE_CHARS + r"+(?:\.[A-Za-z0-9_\-]+)*"
_DIRECTORY = r"(?:\.\.|\.|" + _SEGMENT + r")"

_B64 = r"[A-Za-z0-9+/]"
_B64_LINE = atom(r"[A-Za-z0-9+/=]+\r?\n")
_PEM_HEADERS = atom(r"(?:[A-Za-z0-9\-]+:[^\r\n]*\r?\n)+\r?\n")


def _pem_block(label: str) -> Pattern:
    """``-----BEGIN <label>-----`` … base64 lines … ``-----END <label>-----``.

    An RFC 1421 header block (``Proc-Type:``/``DEK-Info:`` lines followed by a
    blank line) may precede the base64 body, as in encrypted OpenSSL keys.
    """
    return sequence(
        r"-----BEGIN " + label + r"-----\r?\n",
        optional(_PEM_HEADERS),
        repeat(_B64_LINE, 1),
        r"-----END " + label + r"-----",
    )


def _card(first_group: str, rest: tuple[int, ...]) -> Pattern:
    """Card number template: issuer prefix group, then digit groups.

    Groups are joined by nothing, a space, or a hyphen; one separator style
    per number.
    """
    variants = []
    for sep in ("", " ", "-"):
        groups = "".join(sep + r"[0-9]{%d}" % n for n in rest)
        variants.append(r"\b(?:" + first_group + r")" + groups + r"\b")
    return union(*variants)


# ===========================================================================
# Key material
# ===========================================================================

SSH_PRIVATE_KEY = REGISTRY.register(
    "ssh-private-key",
    _pem_block("OPENSSH PRIVATE KEY"),
    "OpenSSH private key block",
)

SSH_PUBLIC_KEY = REGISTRY.register(
    "ssh-public-key",
    union(
        sequence(
            r"---- BEGIN SSH2 PUBLIC KEY ----\r?\n",
            repeat(r"[A-Za-z0-9\-]+:[^\r\n]*\r?\n", 0),
            repeat(_B64_LINE, 1),
            r"---- END SSH2 PUBLIC KEY ----",
        ),
        r"\b(?:ssh-(?:rsa|dss|ed25519)|ecdsa-sha2-nistp(?:256|384|521)) AAAA"
        + _B64 + r"+={0,3}",
    ),
    "SSH public key (RFC 4716 block or OpenSSH one-line form)",
)

RSA_PRIVATE_KEY = REGISTRY.register(
    "rsa-private-key", _pem_block("RSA PRIVATE KEY"), "PEM RSA private key block"
)
RSA_PUBLIC_KEY = REGISTRY.register(
    "rsa-public-key", _pem_block("RSA PUBLIC KEY"), "PEM RSA public key block"
)
DSA_PRIVATE_KEY = REGISTRY.register(
    "dsa-private-key", _pem_block("DSA PRIVATE KEY"), "PEM DSA private key block"
)
DSA_PUBLIC_KEY = REGISTRY.register(
    "dsa-public-key", _pem_block("DSA PUBLIC KEY"), "PEM DSA public key block"
)
EC_PRIVATE_KEY = REGISTRY.register(
    "ec-private-key", _pem_block("EC PRIVATE KEY"), "PEM EC private key block"
)
EC_PUBLIC_KEY = REGISTRY.register(
    "ec-public-key", _pem_block("EC PUBLIC KEY"), "PEM EC public key block"
)

PRIVATE_KEY = REGISTRY.register(
    "private-key",
    union(
        SSH_PRIVATE_KEY,
        RSA_PRIVATE_KEY,
        DSA_PRIVATE_KEY,
        EC_PRIVATE_KEY,
        _pem_block("PRIVATE KEY"),
        _pem_block("ENCRYPTED PRIVATE KEY"),
    ),
    "Any private key block",
)

PUBLIC_KEY = REGISTRY.register(
    "public-key",
    union(
        SSH_PUBLIC_KEY,
        RSA_PUBLIC_KEY,
        DSA_PUBLIC_KEY,
        EC_PUBLIC_KEY,
        _pem_block("PUBLIC KEY"),
    ),
    "Any public key",
)


# ===========================================================================
# Hashes
# ===========================================================================

MD5 = REGISTRY.register("md5", r"\b[0-9A-Fa-f]{32}\b", "MD5 digest (32 hex chars)")
SHA1 = REGISTRY.register("sha1", r"\b[0-9A-Fa-f]{40}\b", "SHA-1 digest (40 hex chars)")
SHA256 = REGISTRY.register(
    "sha256", r"\b[0-9A-Fa-f]{64}\b", "SHA-256 digest (64 hex chars)"
)
SHA512 = REGISTRY.register(
    "sha512", r"\b[0-9A-Fa-f]{128}\b", "SHA-512 digest (128 hex chars)"
)

HASH = REGISTRY.register("hash", union(MD5, SHA1, SHA256, SHA512), "Any hex digest")


# ===========================================================================
# Cloud credentials
# ===========================================================================

AWS_ACCESS_KEY_ID = REGISTRY.register(
    "aws-access-key-id",
    r"\b(?:A3T[A-Z0-9]|AKIA|AGPA|AIDA|AROA|AIPA|ANPA|ANVA|ASIA)[A-Z0-9]{16}\b",
    "AWS access key ID",
)

AWS_SECRET_ACCESS_KEY = REGISTRY.register(
    "aws-secret-access-key",
    r"\b" + _B64 + r"{40}\b",
    "AWS secret access key (40 base64-alphabet chars)",
)

API_KEY = REGISTRY.register(
    "api-key",
    union(HASH, AWS_ACCESS_KEY_ID, AWS_SECRET_ACCESS_KEY),
    "Any hash-shaped or AWS-shaped API credential",
)


# ===========================================================================
# Financial and personal identifiers
# ===========================================================================

AMEX_CC = REGISTRY.register(
    "amex-cc", _card(r"3[47][0-9]{2}", (6, 5)), "American Express card number"
)

DISCOVER_CC = REGISTRY.register(
    "discover-cc",
    _card(r"6011|65[0-9]{2}|64[4-9][0-9]", (4, 4, 4)),
    "Discover card number",
)

MASTERCARD_CC = REGISTRY.register(
    "mastercard-cc",
    _card(r"5[1-5][0-9]{2}|222[1-9]|22[3-9][0-9]|2[3-6][0-9]{2}|27[01][0-9]|2720", (4, 4, 4)),
    "MasterCard card number",
)

VISA_CC = REGISTRY.register(
    "visa-cc",
    union(_card(r"4[0-9]{3}", (4, 4, 4)), r"\b4[0-9]{12}\b"),
    "Visa card number (16 digits, or legacy 13)",
)

CREDIT_CARD = REGISTRY.register(
    "credit-card",
    union(AMEX_CC, DISCOVER_CC, MASTERCARD_CC, VISA_CC),
    "Any supported card number",
)

SSN = REGISTRY.register("ssn", r"\b[0-9]{3}-[0-9]{2}-[0-9]{4}\b", "US social security number")

PHONE_NUMBER = REGISTRY.register(
    "phone-number",
    union(
        # North American: +1 (555) 555-0100, 1-800-555-0100, 555.555.0100
        r"(?:(?:\+|\b)1[ .\-]?)?(?:\([0-9]{3}\) ?|\b[0-9]{3}[ .\-])[0-9]{3}[ .\-][0-9]{4}\b",
        # International: +44 20 7946 0958, +49-30-1234-5678
        r"\+[0-9]{1,3}[ .\-][0-9]{1,4}(?:[ .\-][0-9]{2,4}){2,3}\b",
        # Local exchange: 555-0100
        r"\b[0-9]{3}-[0-9]{4}\b",
    ),
    "Telephone number",
)


# ===========================================================================
# Network
# ===========================================================================

MAC_ADDRESS = REGISTRY.register(
    "mac-address",
    union(
        r"\b[0-9A-Fa-f]{2}(?::[0-9A-Fa-f]{2}){5}\b",
        r"\b[0-9A-Fa-f]{2}(?:-[0-9A-Fa-f]{2}){5}\b",
        r"\b[0-9A-Fa-f]{4}(?:\.[0-9A-Fa-f]{4}){2}\b",
    ),
    "MAC address",
)

IPV4_ADDRESS = REGISTRY.register(
    "ipv4-address",
    r"\b" + _IPV4_BARE + r"\b",
    "IPv4 address (octets 0-255)",
    boundary=BOUNDARY_DOTTED,
)

IPV6_ADDRESS = REGISTRY.register(
    "ipv6-address",
    union(
        r"\b(?:%s:){7}%s\b" % (_HEX4, _HEX4),
        r"\b(?:%s:){1,7}:" % _HEX4,
        r"\b(?:%s:){1,6}:%s\b" % (_HEX4, _HEX4),
        r"\b(?:%s:){1,5}(?::%s){1,2}\b" % (_HEX4, _HEX4),
        r"\b(?:%s:){1,4}(?::%s){1,3}\b" % (_HEX4, _HEX4),
        r"\b(?:%s:){1,3}(?::%s){1,4}\b" % (_HEX4, _HEX4),
        r"\b(?:%s:){1,2}(?::%s){1,5}\b" % (_HEX4, _HEX4),
        r"\b%s:(?::%s){1,6}\b" % (_HEX4, _HEX4),
        r":(?:(?::%s){1,7}\b|:)" % _HEX4,
        r"\b(?:%s:){6}%s\b" % (_HEX4, _IPV4_BARE),
        r"(?:\b(?:%s:){0,5}%s)?::(?:%s:){0,4}%s\b" % (_HEX4, _HEX4, _HEX4, _IPV4_BARE),
    ),
    "IPv6 address, with at most one :: compression",
)

IP_ADDRESS = REGISTRY.register(
    "ip-address",
    union(IPV4_ADDRESS, IPV6_ADDRESS),
    "IPv4 or IPv6 address",
    boundary=BOUNDARY_DOTTED,
)

DOMAIN_NAME = REGISTRY.register(
    "domain-name",
    r"\b(?:" + _LABEL + r"\.)+" + _TLD + r"\b",
    "Domain name (two or more labels, alphabetic TLD)",
)

EMAIL_ADDRESS = REGISTRY.register(
    "email-address", sequence(_LOCAL_PART, "@", DOMAIN_NAME), "Email address"
)

OBFUSCATED_EMAIL_ADDRESS = REGISTRY.register(
    "obfuscated-email-address",
    sequence(
        _LOCAL_PART,
        union(
            r"\s*[\[({<]\s*(?i:at|@)\s*[\])}>]\s*",
            r"\s+AT\s+",
        ),
        repeat(
            sequence(
                _LABEL,
                union(r"\s*[\[({<]\s*(?i:dot|\.)\s*[\])}>]\s*", r"\s+DOT\s+", r"\."),
            ),
            1,
        ),
        _TLD + r"\b",
    ),
    "Email address with @ (and optionally dots) spelled out",
)

_HOST = union(
    DOMAIN_NAME,
    IPV4_ADDRESS,
    sequence(r"\[", IPV6_ADDRESS, r"\]"),
    r"\b" + _LABEL + r"\b",
)

_AUTHORITY_AND_PATH = sequence(_USERINFO, _HOST, _PORT, _URI_TAIL)

URL = REGISTRY.register(
    "url",
    sequence(
        r"\b(?i:https?|ftps?|sftp|ssh|git|wss?|rtsp|smb|ldaps?|telnet|irc|nntp)://",
        _AUTHORITY_AND_PATH,
    ),
    "URL with a network scheme and an authority",
)

URI = REGISTRY.register(
    "uri",
    sequence(
        r"\b[A-Za-z][A-Za-z0-9+.\-]*:",
        union(
            sequence("//", _AUTHORITY_AND_PATH),
            r"(?:" + _URI_CHARS + r"|[/?#])*(?:" + _URI_LAST + r"|[/?#])",
        ),
    ),
    "URI: scheme, colon, hierarchical or opaque part",
)


# ===========================================================================
# Numbers, words and identifiers
# ===========================================================================

NUMBER = REGISTRY.register(
    "number",
    r"(?:\B[+\-])?\b[0-9]+(?:\.[0-9]+)?\b",
    "Decimal number, optional sign and fraction",
)

HEX_NUMBER = REGISTRY.register(
    "hex-number", r"\b0[xX][0-9A-Fa-f]+\b", "Hexadecimal number with 0x prefix"
)

VERSION_NUMBER = REGISTRY.register(
    "version-number",
    r"\b[0-9]+(?:\.[0-9]+)+\b",
    "Dotted version number",
    boundary=BOUNDARY_DOTTED,
)

# Unicode letters, combining marks and digits. re2's \w and \b are ASCII, so
# these categories rely on BOUNDARY_WORD instead of \b.
_WORD_CHAR = r"[\p{L}\p{M}\p{N}_]"
_IDENT = r"[\p{L}_]" + _WORD_CHAR + r"*"

WORD = REGISTRY.register(
    "word",
    _WORD_CHAR + r"+",
    "Run of letters, digits and underscores",
    boundary=BOUNDARY_WORD,
)

HOST_NAME = REGISTRY.register(
    "host-name", union(DOMAIN_NAME, WORD), "Host name", boundary=BOUNDARY_WORD
)

VARIABLE_NAME = REGISTRY.register(
    "variable-name", _IDENT, "Identifier", boundary=BOUNDARY_WORD
)

FUNCTION_NAME = REGISTRY.register(
    "function-name",
    _IDENT + r"(?:(?:\.|::)" + _IDENT + r")*",
    "Identifier, optionally qualified with . or ::",
    boundary=BOUNDARY_WORD,
)

FILE_NAME = REGISTRY.register(
    "file-name",
    union(
        r"\b" + _FILE_CHARS + r"+" + _FILE_EXT + r"\b",
        r"\B\." + _FILE_CHARS + r"+(?:" + _FILE_EXT + r")?\b",
    ),
    "File name with an extension, or a dot-file",
)

DIR_NAME = REGISTRY.register(
    "dir-name",
    union(
        r"\b" + _FILE_CHARS + r"+(?:\.[A-Za-z0-9_\-]+)*\b",
        r"\B\." + _FILE_CHARS + r"+\b",
    ),
    "Directory name (a single path segment)",
)


# ===========================================================================
# Paths
# ===========================================================================

RELATIVE_UNIX_PATH = REGISTRY.register(
    "relative-unix-path",
    sequence(repeat(_DIRECTORY + r"/", 1), _DIRECTORY + r"/?"),
    "Relative UNIX path",
)

ABSOLUTE_UNIX_PATH = REGISTRY.register(
    "absolute-unix-path",
    sequence(repeat(r"/" + _DIRECTORY, 1), r"/?"),
    "Absolute UNIX path",
)

UNIX_PATH = REGISTRY.register(
    "unix-path", union(ABSOLUTE_UNIX_PATH, RELATIVE_UNIX_PATH), "UNIX path"
)

RELATIVE_WINDOWS_PATH = REGISTRY.register(
    "relative-windows-path",
    sequence(repeat(_DIRECTORY + r"\\", 1), _DIRECTORY + r"\\?"),
    "Relative Windows path",
)

ABSOLUTE_WINDOWS_PATH = REGISTRY.register(
    "absolute-windows-path",
    union(
        sequence(r"\b[A-Za-z]:", repeat(r"\\" + _DIRECTORY, 1), r"\\?"),
        sequence(r"\\\\" + _SEGMENT, repeat(r"\\" + _DIRECTORY, 1), r"\\?"),
    ),
    "Absolute Windows path (drive letter or UNC share)",
)

WINDOWS_PATH = REGISTRY.register(
    "windows-path", union(ABSOLUTE_WINDOWS_PATH, RELATIVE_WINDOWS_PATH), "Windows path"
)

PATH = REGISTRY.register("path", union(UNIX_PATH, WINDOWS_PATH), "UNIX or Windows path")


# ===========================================================================
# Strings and encoded data
# ===========================================================================

SINGLE_QUOTED_STRING = REGISTRY.register(
    "single-quoted-string",
    r"'(?:[^'\\]|\\(?s:.))*'",
    "Single-quoted string, backslash escapes honoured",
)

DOUBLE_QUOTED_STRING = REGISTRY.register(
    "double-quoted-string",
    r'"(?:[^"\\]|\\(?s:.))*"',
    "Double-quoted string, backslash escapes honoured",
)

STRING = REGISTRY.register(
    "string", union(SINGLE_QUOTED_STRING, DOUBLE_QUOTED_STRING), "Quoted string"
)

BASE64 = REGISTRY.register(
    "base64",
    r"\b(?:" + _B64 + r"{4})+(?:" + _B64 + r"{2}==|" + _B64 + r"{3}=|\b)",
    "Base64 data, length a multiple of 4 with optional = padding",
)


REGISTRY.freeze()
