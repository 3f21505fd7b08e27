"""
Probe layer: signal collection against a mocked network (httpx.MockTransport).
"""
import socket

import httpx
import pytest

from readiness.errors import UpstreamFetchError, ValidationError
from readiness.models import ProbeStatus
from readiness.services.probe import (
    _client, build_signals, check_llms, collect_signals, ensure_public_target, fetch_page,
    has_favicon_markup, has_structured_data, normalize_target, probe_resource,
)

TARGET = "https://example.com"
RICH_PAGE = (
    '<html><head><link rel="icon" href="/icon.png">'
    '<script type="application/ld+json">{"@type": "Organization"}</script>'
    "</head><body>" + "<p>content</p>" * 1000 + "</body></html>"
)


def mock_client(routes, page=RICH_PAGE):
    """
    routes maps a path to an HTTP status or an exception class.
    The page itself is served at "/" unless routes overrides it.
    """
    def handler(request: httpx.Request) -> httpx.Response:
        path = request.url.path or "/"
        outcome = routes.get(path, 200 if path == "/" else 404)
        if isinstance(outcome, type) and issubclass(outcome, Exception):
            raise outcome("simulated failure", request=request)
        body = page if path == "/" else "ok"
        return httpx.Response(outcome, text=body)

    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


# ─── Signal collection ────────────────────────────────────────────────────────

class TestCollectSignals:

    @pytest.mark.asyncio
    async def test_three_state_probe_outcomes(self):
        routes = {"/llms.txt": 200, "/robots.txt": 404, "/sitemap.xml": httpx.ConnectError}
        async with mock_client(routes) as client:
            report = await collect_signals(TARGET, client)

        assert report.probes == {
            "llms_txt": ProbeStatus.PRESENT,
            "robots_txt": ProbeStatus.ABSENT,
            "sitemap_xml": ProbeStatus.PROBE_FAILED,
            "favicon": ProbeStatus.ABSENT,
        }
        signals = report.signals
        assert signals.llms_txt is True
        assert signals.robots_txt is False
        assert signals.sitemap_xml is False
        assert signals.https is True
        assert signals.structured_data is True
        assert signals.favicon is True   # from the <link rel="icon"> tag
        assert signals.content_length == len(RICH_PAGE.encode())

    @pytest.mark.asyncio
    async def test_probe_timeout_is_fail_open(self):
        routes = {"/llms.txt": httpx.ReadTimeout, "/robots.txt": 200}
        async with mock_client(routes) as client:
            report = await collect_signals(TARGET, client)
        assert report.probes["llms_txt"] == ProbeStatus.PROBE_FAILED
        assert report.signals.llms_txt is False
        assert report.signals.robots_txt is True

    @pytest.mark.asyncio
    async def test_favicon_from_well_known_path(self):
        async with mock_client({"/favicon.ico": 200}, page="<html></html>") as client:
            report = await collect_signals(TARGET, client)
        assert report.signals.favicon is True
        assert report.signals.structured_data is False

    @pytest.mark.asyncio
    async def test_http_target_has_no_https_signal(self):
        async with mock_client({}) as client:
            report = await collect_signals("http://example.com", client)
        assert report.signals.https is False

    @pytest.mark.asyncio
    async def test_page_error_status_still_counts_as_fetched(self):
        async with mock_client({"/": 404}, page="not found") as client:
            report = await collect_signals(TARGET, client)
        assert report.signals.content_length == len(b"not found")

    @pytest.mark.asyncio
    async def test_page_connection_error_is_fatal(self):
        async with mock_client({"/": httpx.ConnectError, "/llms.txt": 200}) as client:
            with pytest.raises(UpstreamFetchError) as exc:
                await collect_signals(TARGET, client)
        assert exc.value.message == "Could not fetch the target site"

    @pytest.mark.asyncio
    async def test_page_timeout_is_fatal(self):
        async with mock_client({"/": httpx.ReadTimeout}) as client:
            with pytest.raises(UpstreamFetchError) as exc:
                await collect_signals(TARGET, client)
        assert "timeout" in exc.value.cause

    @pytest.mark.asyncio
    async def test_check_llms_reports_each_state(self):
        for outcome, expected in [
            (200, ProbeStatus.PRESENT),
            (403, ProbeStatus.ABSENT),
            (httpx.ConnectTimeout, ProbeStatus.PROBE_FAILED),
        ]:
            async with mock_client({"/llms.txt": outcome}) as client:
                assert await check_llms(TARGET, client) == expected

    @pytest.mark.asyncio
    async def test_page_failure_settles_pending_fetches(self):
        async with mock_client({"/": httpx.ConnectError, "/robots.txt": httpx.ReadTimeout}) as client:
            with pytest.raises(UpstreamFetchError):
                await collect_signals(TARGET, client)
            # the client is still usable once the cancelled fetches have settled
            assert await check_llms(TARGET, client) == ProbeStatus.ABSENT

    @pytest.mark.asyncio
    @pytest.mark.parametrize("error", [httpx.InvalidURL("bad port"), ValueError("port out of range")])
    async def test_unusable_url_is_fail_open_for_well_known_files(self, error):
        def handler(request: httpx.Request) -> httpx.Response:
            raise error

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            assert await probe_resource(client, f"{TARGET}/llms.txt") == ProbeStatus.PROBE_FAILED
            with pytest.raises(UpstreamFetchError):
                await fetch_page(client, TARGET)


# ─── Markers ──────────────────────────────────────────────────────────────────

class TestMarkers:

    @pytest.mark.parametrize("html", [
        b'<link rel="icon" href="/a.png">',
        b"<link rel='icon' href='/a.png'>",
        b'<link rel="shortcut icon" href="/a.ico">',
        b"<link rel='shortcut icon' href='/a.ico'>",
        b'<link href="/static/FAVICON.ICO">',
    ])
    def test_favicon_markup(self, html):
        assert has_favicon_markup(html) is True

    def test_no_favicon_markup(self):
        assert has_favicon_markup(b'<link rel="stylesheet" href="/a.css">') is False

    def test_structured_data_marker(self):
        assert has_structured_data(b'<script type="application/ld+json">{}</script>') is True
        assert has_structured_data(b"<script>{}</script>") is False

    def test_content_length_counts_bytes_not_characters(self):
        html = ("あ" * 4000).encode("utf-8")
        signals = build_signals(TARGET, html, {})
        assert signals.content_length == 12000
        assert all(v is False for v in (signals.llms_txt, signals.robots_txt, signals.sitemap_xml))


# ─── URL handling ─────────────────────────────────────────────────────────────

class TestUrlNormalization:

    def test_trailing_slash_removed(self):
        assert normalize_target("https://example.com/") == "https://example.com"

    def test_whitespace_stripped(self):
        assert normalize_target("  https://example.com/path/  ") == "https://example.com/path"

    def test_http_url_unchanged(self):
        assert normalize_target("http://example.com") == "http://example.com"

    @pytest.mark.parametrize("url", [None, "", "   "])
    def test_missing_url(self, url):
        with pytest.raises(ValidationError, match="URL is required"):
            normalize_target(url)

    @pytest.mark.parametrize("url", ["example.com", "ftp://example.com", "https://"])
    def test_malformed_url(self, url):
        with pytest.raises(ValidationError):
            normalize_target(url)

    @pytest.mark.parametrize("url", ["http://example.com:99999", "https://example.com:-1", "http://example.com:port"])
    def test_invalid_port(self, url):
        with pytest.raises(ValidationError, match="invalid port"):
            normalize_target(url)


class TestSSRFProtection:

    @pytest.mark.parametrize("url", [
        "http://127.0.0.1:8080", "http://10.0.0.1", "http://172.16.0.1",
        "http://192.168.1.1", "http://169.254.1.1", "http://[::1]", "http://localhost",
        "http://[fe80::1]", "http://[::ffff:127.0.0.1]", "http://[::ffff:10.0.0.1]",
    ])
    def test_private_targets_are_blocked(self, url):
        with pytest.raises(ValidationError, match="SSRF"):
            ensure_public_target(url)

    def test_public_ip_is_allowed(self):
        ensure_public_target("https://8.8.8.8")

    def test_name_resolving_to_private_ip_is_blocked(self, monkeypatch):
        monkeypatch.setattr(
            socket, "getaddrinfo",
            lambda host, port, *a, **k: [(socket.AF_INET, socket.SOCK_STREAM, 6, "", ("10.1.2.3", 0))],
        )
        with pytest.raises(ValidationError):
            ensure_public_target("https://intranet.example")

    def test_unresolvable_name_passes_through(self, monkeypatch):
        def fail(*args, **kwargs):
            raise socket.gaierror("no such host")
        monkeypatch.setattr(socket, "getaddrinfo", fail)
        ensure_public_target("https://does-not-exist.invalid")

    def test_public_name_is_allowed(self, public_dns, safe_url):
        ensure_public_target(safe_url)

    @pytest.mark.asyncio
    async def test_redirect_to_private_address_is_not_followed(self, public_dns):
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request.url.host)
            if request.url.host == "example.com":
                return httpx.Response(302, headers={"Location": "http://127.0.0.1/admin"})
            return httpx.Response(200, text="internal")

        async with _client(transport=httpx.MockTransport(handler)) as client:
            assert await probe_resource(client, f"{TARGET}/llms.txt") == ProbeStatus.PROBE_FAILED
            with pytest.raises(UpstreamFetchError):
                await fetch_page(client, TARGET)
        assert "127.0.0.1" not in seen
        assert seen == ["example.com", "example.com"]

    @pytest.mark.asyncio
    async def test_redirect_to_public_address_is_followed(self, public_dns):
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path == "/llms.txt":
                return httpx.Response(301, headers={"Location": "https://www.example.com/llms.txt"})
            return httpx.Response(200, text="ok")

        async with _client(transport=httpx.MockTransport(handler)) as client:
            assert await probe_resource(client, f"{TARGET}/llms.txt") == ProbeStatus.PRESENT
