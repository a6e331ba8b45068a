"""httpcli urls - combine a stored base URL with a request URL argument."""

import posixpath
from urllib.parse import SplitResult, parse_qs, urlencode, urlsplit, urlunsplit

from httpcli.errors import MissingBaseURL


def is_absolute(parts: SplitResult) -> bool:
    return bool(parts.scheme and parts.netloc)


def parse_absolute_url(value: str) -> SplitResult | None:
    """Split value, returning None unless it is an absolute URL.

    Raises ValueError for strings urllib cannot split at all.
    """
    parts = urlsplit(value)
    if not is_absolute(parts):
        return None
    return parts


def clean_join(base_path: str, rel_path: str) -> str:
    """Join two URL paths and clean the result.

    The relative path is always appended, even when it starts with '/':
    clean_join('/v1', '/widgets') == '/v1/widgets'.
    """
    joined = posixpath.normpath(f"{base_path or '/'}/{rel_path}")
    # normpath keeps a leading '//' (POSIX allows it); URL paths don't.
    if joined.startswith("//"):
        joined = "/" + joined.lstrip("/")
    return joined


def merge_query(base_query: str, arg_query: str) -> str:
    """Merge query strings; keys present in arg_query replace base ones."""
    merged = parse_qs(base_query, keep_blank_values=True)
    merged.update(parse_qs(arg_query, keep_blank_values=True))
    return urlencode(sorted(merged.items()), doseq=True)


def combine_urls(base_url: str | None, arg_url: str) -> str:
    """Resolve a request URL argument against the stored base URL.

    - An absolute argument is returned unchanged; the base is ignored.
    - A relative argument requires a base (MissingBaseURL otherwise).
    - Scheme, host and user-info come from the base; the path is the
      clean join of both paths; the query is the base's overridden
      key-by-key by the argument's; the fragment comes from the argument.
    """
    arg = urlsplit(arg_url)
    if is_absolute(arg):
        return arg_url

    if not base_url:
        raise MissingBaseURL()
    base = urlsplit(base_url)
    if not is_absolute(base):
        raise MissingBaseURL(f"Base URL '{base_url}' is not an absolute URL.")

    return urlunsplit(
        (
            base.scheme,
            base.netloc,
            clean_join(base.path, arg.path),
            merge_query(base.query, arg.query),
            arg.fragment,
        ),
    )
