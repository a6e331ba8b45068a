"""httpcli output - diagnostic dumps and response body rendering.

Diagnostics (request line, headers, status) go to stderr; stdout gets
the response body and nothing else so it can be piped.
"""

import json

import click

from httpcli.executor import RequestResult
from httpcli.headers import Headers, format_headers

RULE = "-" * 80
JSON_MEDIA_TYPE = "application/json"


def format_request(
    method: str,
    url: str,
    headers: Headers,
    body: bytes | None = None,
) -> str:
    """Render the outgoing request for the stderr dump."""
    out = f"{method} {url}\n{format_headers(headers)}\n"
    if body is not None:
        out += body.decode("utf-8", errors="replace") + "\n\n"
    return out + RULE + "\n"


def format_response(result: RequestResult) -> str:
    """Render status line and headers of the response."""
    headers = {name: [value] for name, value in result.headers.items()}
    return f"{result.status_line}\n\n{format_headers(headers)}\n"


def pretty_json(data: bytes) -> bytes:
    """Re-serialize a JSON document with 2-space indentation.

    Raises ValueError if data isn't valid UTF-8 JSON, RecursionError if
    it nests deeper than the decoder can follow.
    """
    obj = json.loads(data.decode("utf-8"))
    return json.dumps(obj, indent=2, ensure_ascii=False).encode("utf-8")


def write_body(result: RequestResult, pretty: bool = False, quiet: bool = False) -> None:
    """Copy the response body to stdout.

    With pretty=True and a JSON response the body is buffered, indented
    and followed by one newline. If it doesn't decode, a warning goes to
    stderr and the original bytes are written untouched.
    """
    if pretty and result.content_type == JSON_MEDIA_TYPE:
        data = b"".join(result.iter_body())
        try:
            out = pretty_json(data)
        except (ValueError, RecursionError) as e:
            click.echo(f"WARNING: Error decoding JSON response: {e}", err=True)
        else:
            click.echo(out, nl=False)
            click.echo()
            return
        click.echo(data, nl=False)
    else:
        for chunk in result.iter_body():
            click.echo(chunk, nl=False)

    if not quiet:
        # stdout gets no trailing newline; keep a terminal mixing both tidy
        click.echo(err=True)
