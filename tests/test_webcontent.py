import threading
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer

import pytest

from mcphost.webcontent import (
    FetchError,
    extract_body_content,
    extract_text_from_html,
    fetch_url,
    html_to_markdown,
    is_localhost,
    normalize_url,
)

PAGE = b"""<!DOCTYPE html>
<html>
<head><title>Test Page</title></head>
<body>
<h1>Hello World</h1>
<p>This is a test paragraph.</p>
</body>
</html>"""


class _Handler(BaseHTTPRequestHandler):
    def log_message(self, *args):
        pass

    def _send(self, status, content_type, body, length=True):
        self.send_response(status)
        if content_type:
            self.send_header("Content-Type", content_type)
        if length:
            self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        try:
            self.wfile.write(body)
        except OSError:
            pass

    def do_GET(self):
        if self.path == "/html":
            self._send(200, "text/html", PAGE)
        elif self.path == "/text":
            self._send(200, "text/plain", b"This is plain text content")
        elif self.path == "/agent":
            self._send(200, "text/plain", self.headers["User-Agent"].encode())
        elif self.path == "/exact":
            self._send(200, "text/plain", b"x" * (5 * 1024 * 1024))
        elif self.path == "/large":
            self._send(200, "text/plain", b"x" * (6 * 1024 * 1024))
        elif self.path == "/large-stream":
            self._send(200, "text/plain", b"x" * (6 * 1024 * 1024), length=False)
        elif self.path == "/error":
            self._send(500, None, b"")
        else:
            self._send(404, None, b"")


@pytest.fixture(scope="module")
def base_url():
    server = ThreadingHTTPServer(("127.0.0.1", 0), _Handler)
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    yield f"http://127.0.0.1:{server.server_address[1]}"
    server.shutdown()
    server.server_close()


@pytest.mark.parametrize(
    "host, expected",
    [
        ("localhost", True),
        ("localhost:8080", True),
        ("127.0.0.1:9000", True),
        ("::1", True),
        ("example.com", False),
        ("10.0.0.1", False),
    ],
)
def test_is_localhost(host, expected):
    assert is_localhost(host) is expected


def test_normalize_adds_https():
    assert normalize_url("example.com/page") == "https://example.com/page"


def test_normalize_upgrades_external_http():
    assert normalize_url("http://example.com/a", upgrade_http=True) == "https://example.com/a"


def test_normalize_keeps_http_without_upgrade():
    assert normalize_url("http://example.com/a") == "http://example.com/a"


def test_normalize_keeps_localhost_http():
    assert normalize_url("http://localhost:8000/x", upgrade_http=True) == "http://localhost:8000/x"


def test_normalize_rejects_other_schemes():
    with pytest.raises(FetchError, match="URL must use http:// or https://"):
        normalize_url("ftp://example.com/file")


@pytest.mark.parametrize(
    "html, expected",
    [
        (
            "<!DOCTYPE html>\n<html>\n<head><title>Test</title></head>\n<body>\n"
            "<h1>Content</h1>\n<p>Paragraph</p>\n</body>\n</html>",
            "\n<h1>Content</h1>\n<p>Paragraph</p>\n\n",
        ),
        ("<div>No body tag</div>", "<div>No body tag</div>"),
        ("<html><body></body></html>", ""),
    ],
)
def test_extract_body_content(html, expected):
    assert extract_body_content(html) == expected


def test_extract_text_drops_scripts_and_blank_lines():
    html = "<p>One</p>\n\n<p>  Two  </p>\n<script>bad()</script>\n<style>p{}</style>"
    assert extract_text_from_html(html) == "One\nTwo"


def test_markdown_heading_and_paragraph():
    assert html_to_markdown("<h1>Hello World</h1><p>Para</p>") == "# Hello World\n\nPara"


def test_markdown_list():
    html = "<ul>\n  <li>Item 1</li>\n  <li>Item 2</li>\n</ul>"
    assert html_to_markdown(html) == "- Item 1\n- Item 2"


def test_markdown_ordered_list():
    assert html_to_markdown("<ol><li>a</li><li>b</li></ol>") == "1. a\n2. b"


def test_markdown_inline_elements():
    html = '<p><a href="/x">go</a> and <strong>bold</strong> and <em>it</em></p>'
    assert html_to_markdown(html) == "[go](/x) and **bold** and _it_"


def test_markdown_removes_elements():
    html = "<script>alert(1)</script><p>kept</p>"
    assert html_to_markdown(html) == "kept"
    assert html_to_markdown("<noscript>x</noscript><p>y</p>", ["noscript"]) == "y"


def test_markdown_pre_block_keeps_indentation():
    html = "<pre>def f():\n    return 1</pre>"
    assert html_to_markdown(html) == "```\ndef f():\n    return 1\n```"


def test_fetch_html(base_url):
    page = fetch_url(base_url + "/html")
    assert page.content == PAGE.decode()
    assert page.content_type == "text/html"
    assert page.is_html
    assert page.url == base_url + "/html"


def test_fetch_sends_browser_user_agent(base_url):
    page = fetch_url(base_url + "/agent")
    assert page.content.startswith("Mozilla/5.0")
    assert not page.is_html


def test_fetch_server_error(base_url):
    with pytest.raises(FetchError, match="request failed with status code: 500"):
        fetch_url(base_url + "/error")


@pytest.mark.parametrize("path", ["/large", "/large-stream"])
def test_fetch_too_large(base_url, path):
    with pytest.raises(FetchError, match="exceeds 5MB limit"):
        fetch_url(base_url + path)


def test_fetch_exactly_five_megabytes_is_allowed(base_url):
    page = fetch_url(base_url + "/exact")
    assert len(page.content) == 5 * 1024 * 1024


def test_fetch_invalid_url():
    with pytest.raises(FetchError, match="request failed"):
        fetch_url("not-a-valid-url", timeout=5)