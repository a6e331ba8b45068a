"""httpcli headers - header name canonicalization and storage codec.

Headers live in storage as flat KEY=VALUE pairs so they fit both the
session file and shell environment variables:

    X-Api-Key: abc123   <->   HEADER_X_API_KEY=abc123

Multiple values for one header are joined with a single space and read
back as one opaque value.
"""

import re

HEADER_PREFIX = "HEADER_"
VALUE_SEPARATOR = " "
CONTENT_TYPE = "Content-Type"

_NAME_RE = re.compile(r"^[A-Za-z0-9-]+$")

Headers = dict[str, list[str]]


def is_valid_header_name(name: str) -> bool:
    """True if the name survives the storage round-trip unchanged."""
    return bool(_NAME_RE.match(name))


def canonical_header_name(name: str) -> str:
    """Canonical HTTP capitalization: 'x-api-key' -> 'X-Api-Key'."""
    return "-".join(part[:1].upper() + part[1:].lower() for part in name.split("-"))


def header_to_key(name: str) -> str:
    return HEADER_PREFIX + name.upper().replace("-", "_")


def key_to_header(key: str) -> str | None:
    """Inverse of header_to_key. Returns None for non-header keys."""
    if not key.startswith(HEADER_PREFIX) or len(key) == len(HEADER_PREFIX):
        return None
    return canonical_header_name(key[len(HEADER_PREFIX) :].replace("_", "-"))


def is_header_key(key: str) -> bool:
    return key_to_header(key) is not None


def encode_headers(headers: Headers | None) -> dict[str, str]:
    """Flatten a header collection into storage keys and values."""
    encoded: dict[str, str] = {}
    for name, values in (headers or {}).items():
        if isinstance(values, str):
            values = [values]
        encoded[header_to_key(name)] = VALUE_SEPARATOR.join(values)
    return encoded


def decode_headers(values: dict[str, str]) -> Headers:
    """Rebuild a header collection from storage keys; other keys are ignored."""
    headers: Headers = {}
    for key, value in values.items():
        name = key_to_header(key)
        if name is None or not value:
            continue
        headers[name] = [value]
    return headers


def set_header(headers: Headers, name: str, value: str) -> None:
    """Replace all values of a header, like http.Header.Set."""
    delete_header(headers, name)
    headers[canonical_header_name(name)] = [value]


def get_header(headers: Headers, name: str) -> str | None:
    wanted = name.lower()
    for k, values in headers.items():
        if k.lower() == wanted and values:
            return values[0]
    return None


def delete_header(headers: Headers, name: str) -> None:
    wanted = name.lower()
    for k in [k for k in headers if k.lower() == wanted]:
        del headers[k]


def exclude_headers(headers: Headers, names: list[str] | tuple[str, ...]) -> Headers:
    """Return a copy of headers without the named ones (case-insensitive)."""
    excluded = {n.strip().lower() for n in names if n.strip()}
    return {k: list(v) for k, v in headers.items() if k.lower() not in excluded}


def split_header_names(values: list[str] | tuple[str, ...]) -> list[str]:
    """Expand comma-delimited -x arguments into header names."""
    names: list[str] = []
    for value in values:
        names.extend(n.strip() for n in value.split(",") if n.strip())
    return names


def format_headers(headers: Headers) -> str:
    """Render headers as wire-style 'Name: value' lines, sorted by name."""
    lines = []
    for name in sorted(headers):
        for value in headers[name]:
            lines.append(f"{name}: {value}")
    return "".join(line + "\n" for line in lines)


def to_request_headers(headers: Headers) -> dict[str, str]:
    """Collapse to the single-string-per-name form requests expects."""
    return {name: ", ".join(values) for name, values in headers.items() if values}
