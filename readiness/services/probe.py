"""
Probe layer. Fetches the target page and the well-known files with httpx and
reduces the responses to a SignalSet.

Well-known-path probes are fail-open: timeouts and network errors become
ProbeStatus.PROBE_FAILED and end up as a missing signal. Only the primary page
fetch can fail the request.
"""
import asyncio
import contextlib
import ipaddress
import socket
from typing import Dict, Optional
from urllib.parse import urlparse

import httpx

from ..config import get_settings
from ..errors import UpstreamFetchError, ValidationError
from ..logging import get_logger
from ..models import ProbeStatus, SignalReport, SignalSet

logger = get_logger("probe")

WELL_KNOWN_PATHS: Dict[str, str] = {
    "llms_txt": "/llms.txt",
    "robots_txt": "/robots.txt",
    "sitemap_xml": "/sitemap.xml",
    "favicon": "/favicon.ico",
}

STRUCTURED_DATA_MARKER = b"application/ld+json"
ICON_LINK_MARKERS = (
    b'rel="icon"',
    b"rel='icon'",
    b'rel="shortcut icon"',
    b"rel='shortcut icon'",
)

# ── SSRF ───────────────────────────────────────────────────────────────────────
BLOCKED = [
    ipaddress.ip_network("10.0.0.0/8"), ipaddress.ip_network("172.16.0.0/12"),
    ipaddress.ip_network("192.168.0.0/16"), ipaddress.ip_network("127.0.0.0/8"),
    ipaddress.ip_network("169.254.0.0/16"), ipaddress.ip_network("0.0.0.0/8"),
    ipaddress.ip_network("::1/128"), ipaddress.ip_network("fc00::/7"),
    ipaddress.ip_network("fe80::/10"),
]

# Transport failures plus the errors raised for URLs httpx or the socket layer cannot use
FETCH_ERRORS = (httpx.HTTPError, httpx.InvalidURL, ValueError)


def _is_blocked_ip(value: str) -> bool:
    try:
        ip = ipaddress.ip_address(value.split("%", 1)[0])
    except ValueError:
        return False
    # ::ffff:127.0.0.1 must be judged as 127.0.0.1
    if ip.version == 6 and ip.ipv4_mapped is not None:
        ip = ip.ipv4_mapped
    if ip.is_private or ip.is_loopback or ip.is_link_local or ip.is_reserved or ip.is_unspecified:
        return True
    return any(ip in net for net in BLOCKED)


def normalize_target(url: Optional[str]) -> str:
    """Strip whitespace and trailing slashes; require an http(s) URL with a host and a valid port."""
    if not url or not isinstance(url, str) or not url.strip():
        raise ValidationError("URL is required")
    target = url.strip().rstrip("/")
    parsed = urlparse(target)
    if parsed.scheme not in ("http", "https") or not parsed.hostname:
        raise ValidationError("URL must be http:// or https://")
    try:
        parsed.port
    except ValueError as e:
        raise ValidationError("URL has an invalid port") from e
    return target


def ensure_public_target(url: str) -> None:
    """
    Reject targets that point at loopback or private networks.
    Names that do not resolve pass through; the page fetch reports them.
    """
    host = urlparse(url).hostname or ""
    if host.lower() == "localhost" or _is_blocked_ip(host):
        raise ValidationError("URL blocked by SSRF protection.")
    try:
        infos = socket.getaddrinfo(host, None)
    except (socket.gaierror, UnicodeError):
        return
    for *_, sockaddr in infos:
        if _is_blocked_ip(sockaddr[0]):
            raise ValidationError("URL blocked by SSRF protection.")


# ── Markers ────────────────────────────────────────────────────────────────────

def has_structured_data(html: bytes) -> bool:
    return STRUCTURED_DATA_MARKER in html


def has_favicon_markup(html: bytes) -> bool:
    if any(marker in html for marker in ICON_LINK_MARKERS):
        return True
    return b"favicon.ico" in html.lower()


# ── Fetches ────────────────────────────────────────────────────────────────────

async def guard_request(request: httpx.Request) -> None:
    """
    Request hook run before every hop, redirects included, so a public page
    cannot bounce the fetch onto an internal address.
    """
    if not get_settings().block_private_networks:
        return
    try:
        await asyncio.to_thread(ensure_public_target, str(request.url))
    except ValidationError as e:
        raise httpx.RequestError(f"blocked redirect target {request.url.host}", request=request) from e


def _client(transport: Optional[httpx.AsyncBaseTransport] = None) -> httpx.AsyncClient:
    settings = get_settings()
    return httpx.AsyncClient(
        follow_redirects=True,
        headers={"User-Agent": settings.user_agent},
        event_hooks={"request": [guard_request]},
        transport=transport,
    )


async def probe_resource(client: httpx.AsyncClient, url: str) -> ProbeStatus:
    """GET a well-known file. HTTP 200 means present; never raises."""
    timeout = get_settings().probe_timeout_seconds
    try:
        response = await client.get(url, timeout=timeout)
    except FETCH_ERRORS as e:
        logger.debug("probe %s failed: %s", url, e)
        return ProbeStatus.PROBE_FAILED
    if response.status_code == 200:
        return ProbeStatus.PRESENT
    logger.debug("probe %s returned HTTP %s", url, response.status_code)
    return ProbeStatus.ABSENT


async def fetch_page(client: httpx.AsyncClient, url: str) -> bytes:
    """Fetch the primary page body. Any HTTP status counts; transport errors do not."""
    timeout = get_settings().page_timeout_seconds
    try:
        response = await client.get(url, timeout=timeout)
    except httpx.TimeoutException as e:
        logger.warning("page fetch timed out for %s: %s", url, e)
        raise UpstreamFetchError(cause=f"timeout after {timeout}s") from e
    except FETCH_ERRORS as e:
        logger.warning("page fetch failed for %s: %s", url, e)
        raise UpstreamFetchError(cause=str(e)[:120]) from e
    return response.content


def build_signals(target: str, html: bytes, probes: Dict[str, ProbeStatus]) -> SignalSet:
    """Collapse probe outcomes and page markers into the boolean SignalSet."""
    present = {key: status == ProbeStatus.PRESENT for key, status in probes.items()}
    return SignalSet(
        https=urlparse(target).scheme == "https",
        llms_txt=present.get("llms_txt", False),
        robots_txt=present.get("robots_txt", False),
        sitemap_xml=present.get("sitemap_xml", False),
        structured_data=has_structured_data(html),
        favicon=present.get("favicon", False) or has_favicon_markup(html),
        content_length=len(html),
    )


async def collect_signals(
    target: str,
    client: Optional[httpx.AsyncClient] = None,
) -> SignalReport:
    """
    Fetch the page and the four well-known files concurrently.
    `target` must already be normalized (no trailing slash).
    """
    if client is None:
        async with _client() as owned:
            return await collect_signals(target, owned)

    keys = list(WELL_KNOWN_PATHS)
    probes = asyncio.gather(*(
        probe_resource(client, f"{target}{WELL_KNOWN_PATHS[key]}") for key in keys
    ))
    try:
        html = await fetch_page(client, target)
    except UpstreamFetchError:
        probes.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await probes
        raise
    statuses = dict(zip(keys, await probes))
    logger.debug("probe results for %s: %s", target, {k: v.value for k, v in statuses.items()})

    return SignalReport(
        target=target,
        signals=build_signals(target, html, statuses),
        probes=statuses,
    )


async def check_llms(
    target: str,
    client: Optional[httpx.AsyncClient] = None,
) -> ProbeStatus:
    """Probe only /llms.txt and keep the three-state outcome."""
    if client is None:
        async with _client() as owned:
            return await check_llms(target, owned)
    return await probe_resource(client, f"{target}{WELL_KNOWN_PATHS['llms_txt']}")
