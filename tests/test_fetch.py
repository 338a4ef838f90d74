import threading
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer

import pytest

from mcphost.fetch import execute_fetch, new_fetch_server

HTML_PAGE = b"""<!DOCTYPE html>
<html>
<head>
    <title>Test Page</title>
    <script>console.log('test');</script>
    <style>body { color: red; }</style>
</head>
<body>
    <h1>Hello World</h1>
    <p>This is a test paragraph.</p>
    <ul>
        <li>Item 1</li>
        <li>Item 2</li>
    </ul>
    <script>alert('should be removed');</script>
</body>
</html>"""

PLAIN_TEXT = "This is plain text content.\nWith multiple lines.\nAnd some more text."


class _Handler(BaseHTTPRequestHandler):
    def log_message(self, *args):
        pass

    def _send(self, content_type, body):
        self.send_response(200)
        if content_type:
            self.send_header("Content-Type", content_type)
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        self.wfile.write(body)

    def do_GET(self):
        if self.path == "/html":
            self._send("text/html", HTML_PAGE)
        elif self.path == "/text":
            self._send("text/plain", PLAIN_TEXT.encode())
        elif self.path == "/untyped":
            self._send(None, b"raw bytes")
        else:
            self.send_response(404)
            self.send_header("Content-Length", "0")
            self.end_headers()


@pytest.fixture(scope="module")
def base_url():
    server = ThreadingHTTPServer(("127.0.0.1", 0), _Handler)
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    yield f"http://127.0.0.1:{server.server_address[1]}"
    server.shutdown()
    server.server_close()


def test_server_exposes_fetch_tool():
    server = new_fetch_server()
    (tool,) = server.list_tools()
    assert tool.name == "fetch"
    assert tool.input_schema["properties"]["format"]["enum"] == ["text", "markdown", "html"]
    assert tool.input_schema["required"] == ["url", "format"]


def test_fetch_html(base_url):
    result = execute_fetch({"url": base_url + "/html", "format": "html"})
    assert not result.is_error
    assert "<h1>Hello World</h1>" in result.text
    assert result.meta["title"] == f"{base_url}/html (text/html)"


def test_fetch_text(base_url):
    result = execute_fetch({"url": base_url + "/html", "format": "text"})
    assert not result.is_error
    assert "Hello World" in result.text
    assert "<h1>" not in result.text
    assert "console.log" not in result.text
    assert "should be removed" not in result.text


def test_fetch_markdown(base_url):
    result = execute_fetch({"url": base_url + "/html", "format": "markdown"})
    assert not result.is_error
    assert "# Hello World" in result.text
    assert "- Item 1\n- Item 2" in result.text
    assert "alert" not in result.text


def test_fetch_plain_text(base_url):
    result = execute_fetch({"url": base_url + "/text", "format": "text"})
    assert result.text == PLAIN_TEXT
    assert result.meta["title"] == f"{base_url}/text (text/plain)"


def test_fetch_plain_text_as_markdown(base_url):
    result = execute_fetch({"url": base_url + "/text", "format": "markdown"})
    assert result.text == f"```\n{PLAIN_TEXT}\n```"


def test_fetch_unknown_content_type(base_url):
    result = execute_fetch({"url": base_url + "/untyped", "format": "html"})
    assert result.text == "raw bytes"
    assert result.meta["title"] == f"{base_url}/untyped (unknown)"


def test_fetch_with_timeout(base_url):
    result = execute_fetch({"url": base_url + "/html", "format": "html", "timeout": 10})
    assert "<h1>Hello World</h1>" in result.text


def test_fetch_not_found(base_url):
    result = execute_fetch({"url": base_url + "/missing", "format": "html"})
    assert result.is_error
    assert result.text == "request failed with status code: 404"


def test_fetch_invalid_url():
    result = execute_fetch({"url": "not-a-valid-url", "format": "text", "timeout": 5})
    assert result.is_error
    assert result.text.startswith("request failed")


def test_fetch_invalid_format():
    result = execute_fetch({"url": "https://example.com", "format": "invalid"})
    assert result.is_error
    assert result.text == "format must be 'text', 'markdown', or 'html'"


def test_fetch_missing_url():
    result = execute_fetch({"format": "html"})
    assert result.is_error
    assert result.text == "url parameter is required and must be a string"


def test_fetch_missing_format():
    result = execute_fetch({"url": "https://example.com"})
    assert result.is_error
    assert result.text == "format parameter is required and must be a string"


def test_fetch_rejects_other_scheme():
    result = execute_fetch({"url": "ftp://example.com/file", "format": "html"})
    assert result.is_error
    assert result.text == "URL must use http:// or https://"