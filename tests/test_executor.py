"""Tests for execute_request against a mocked requests.request."""

from unittest.mock import MagicMock, patch

import requests

from httpcli.executor import RequestResult, execute_request


def _fake_response(status=200, reason="OK", headers=None, chunks=(b"ok",)):
    resp = MagicMock()
    resp.status_code = status
    resp.reason = reason
    resp.headers = headers or {"Content-Type": "text/plain"}
    resp.iter_content.return_value = iter(chunks)
    return resp


class TestExecuteRequest:
    @patch("httpcli.executor.requests.request")
    def test_passes_request_through(self, mock_req):
        mock_req.return_value = _fake_response()
        execute_request("post", "https://h/x", {"A": "1"}, b"{}", timeout=2.5)
        _, kwargs = mock_req.call_args
        assert kwargs["method"] == "POST"
        assert kwargs["url"] == "https://h/x"
        assert kwargs["headers"] == {"A": "1"}
        assert kwargs["data"] == b"{}"
        assert kwargs["timeout"] == 2.5
        assert kwargs["stream"] is True

    @patch("httpcli.executor.requests.request")
    def test_no_timeout_by_default(self, mock_req):
        mock_req.return_value = _fake_response()
        execute_request("GET", "https://h/")
        assert mock_req.call_args.kwargs["timeout"] is None

    @patch("httpcli.executor.requests.request")
    def test_result_fields(self, mock_req):
        mock_req.return_value = _fake_response(
            status=404,
            reason="Not Found",
            headers={"Content-Type": "application/json; charset=utf-8"},
            chunks=(b'{"a":', b"", b"1}"),
        )
        result = execute_request("GET", "https://h/")
        assert result.error is None
        assert result.status_code == 404
        assert result.status_line == "404 Not Found"
        assert result.content_type == "application/json"
        assert b"".join(result.iter_body()) == b'{"a":1}'

    @patch("httpcli.executor.requests.request")
    def test_connection_error(self, mock_req):
        mock_req.side_effect = requests.exceptions.ConnectionError("refused")
        result = execute_request("GET", "https://h/")
        assert result.error == "Connection error: refused"
        assert result.status_code == 0

    @patch("httpcli.executor.requests.request")
    def test_timeout(self, mock_req):
        mock_req.side_effect = requests.exceptions.ReadTimeout("slow")
        result = execute_request("GET", "https://h/", timeout=3)
        assert result.error == "Request timed out after 3s"

    @patch("httpcli.executor.requests.request")
    def test_other_request_error(self, mock_req):
        mock_req.side_effect = requests.exceptions.InvalidURL("bad")
        result = execute_request("GET", "https://h/")
        assert result.error.startswith("Request failed:")

    @patch("httpcli.executor.requests.request")
    def test_unexpected_error(self, mock_req):
        mock_req.side_effect = UnicodeEncodeError(
            "latin-1", "日本", 0, 2, "ordinal not in range(256)"
        )
        result = execute_request("GET", "https://h/", {"X-Name": "日本"})
        assert result.error.startswith("Unexpected error:")
        assert "latin-1" in result.error


class TestRequestResult:
    def test_body_error_recorded(self):
        def broken():
            yield b"part"
            raise requests.exceptions.ChunkedEncodingError("cut")

        r = RequestResult()
        r.chunks = broken()
        assert list(r.iter_body()) == [b"part"]
        assert r.body_error == "cut"

    def test_no_content_type(self):
        assert RequestResult().content_type == ""

    def test_close_closes_response(self):
        r = RequestResult()
        r._response = MagicMock()
        r.close()
        r._response.close.assert_called_once()
