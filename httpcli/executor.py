"""httpcli executor - HTTP request execution."""

import time
from collections.abc import Iterable, Iterator

import requests

CHUNK_SIZE = 8192


class RequestResult:
    """Result of an HTTP request.

    The body is not read up front; iter_body() streams it from the
    connection so it can be copied straight to stdout.
    """

    def __init__(self):
        self.status_code: int = 0
        self.reason: str = ""
        self.headers: dict[str, str] = {}
        self.chunks: Iterable[bytes] = ()
        self.elapsed_ms: float = 0
        self.error: str | None = None
        self.body_error: str | None = None
        self._response: requests.Response | None = None

    @property
    def content_type(self) -> str:
        """Media type of the response without parameters, lower-cased."""
        for name, value in self.headers.items():
            if name.lower() == "content-type":
                return value.split(";", 1)[0].strip().lower()
        return ""

    @property
    def status_line(self) -> str:
        return f"{self.status_code} {self.reason}".rstrip()

    def iter_body(self) -> Iterator[bytes]:
        """Yield body chunks; a transport failure midway stops the stream
        and is recorded in body_error."""
        try:
            for chunk in self.chunks:
                if chunk:
                    yield chunk
        except requests.exceptions.RequestException as e:
            self.body_error = str(e)

    def close(self) -> None:
        if self._response is not None:
            self._response.close()


def execute_request(
    method: str,
    url: str,
    headers: dict[str, str] | None = None,
    body: bytes | None = None,
    timeout: float | None = None,
) -> RequestResult:
    """Execute an HTTP request and return structured result.

    - Body is sent fully buffered (with Content-Length)
    - Response body is left unread for streaming
    - Captures timing up to the response headers
    - Never raises on transport failure; returns RequestResult with error set

    timeout=None waits indefinitely.
    """
    result = RequestResult()

    try:
        start = time.monotonic()
        resp = requests.request(
            method=method.upper(),
            url=url,
            headers=headers,
            data=body,
            timeout=timeout,
            allow_redirects=True,
            stream=True,
        )
        result.elapsed_ms = (time.monotonic() - start) * 1000

        result._response = resp
        result.status_code = resp.status_code
        result.reason = resp.reason or ""
        result.headers = dict(resp.headers)
        result.chunks = resp.iter_content(chunk_size=CHUNK_SIZE)

    except requests.exceptions.Timeout:
        result.error = f"Request timed out after {timeout}s"
    except requests.exceptions.ConnectionError as e:
        result.error = f"Connection error: {e}"
    except requests.exceptions.RequestException as e:
        result.error = f"Request failed: {e}"
    except Exception as e:
        result.error = f"Unexpected error: {e}"

    return result
