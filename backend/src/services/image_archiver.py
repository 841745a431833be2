"""Fetching bookmark images (main image, favicon) for archival in object storage."""
import asyncio
import ipaddress
import logging
import re
import socket
from dataclasses import dataclass
from urllib.parse import urlparse

import httpx
from sqlalchemy.ext.asyncio import AsyncSession

from core.config import get_settings
from models.stored_file import StoredFile
from services import storage_service
from services.utils import create_slug

logger = logging.getLogger(__name__)

USER_AGENT = 'Mozilla/5.0 (compatible; Bookmarks/1.0)'

# Image URLs are recognized by their path extension (query string ignored)
IMAGE_EXTENSIONS = ('avif', 'bmp', 'gif', 'ico', 'jpeg', 'jpg', 'png', 'svg', 'webp')
IMAGE_URL_PATTERN = re.compile(
    r'\.(' + '|'.join(IMAGE_EXTENSIONS) + r')$',
    re.IGNORECASE,
)


class SSRFBlockedError(Exception):
    """Raised when a URL targets a private/internal network address."""

    pass


def is_image_url(url: str | None) -> bool:
    """
    Check whether a URL points at an image, judging by its path extension.

    Only http(s) URLs qualify.
    """
    if not url:
        return False
    parsed = urlparse(url.strip())
    if parsed.scheme.lower() not in ('http', 'https') or not parsed.netloc:
        return False
    return bool(IMAGE_URL_PATTERN.search(parsed.path))


def image_extension(url: str) -> str:
    """Return the lowercase file extension of an image URL ('png', 'jpg', ...)."""
    path = urlparse(url).path
    return path.rsplit('.', 1)[-1].lower()


def image_file_name(url: str, title: str | None) -> str:
    """Build the stored file name from the bookmark title and the image extension."""
    return f"{create_slug(title)}.{image_extension(url)}"


def is_private_ip(ip_str: str) -> bool:
    """
    Check if an IP address is private, loopback, or otherwise internal.

    Args:
        ip_str: IP address string (IPv4 or IPv6).

    Returns:
        True if the IP is private/internal, False if public.
    """
    try:
        ip = ipaddress.ip_address(ip_str)
        return (
            ip.is_private
            or ip.is_loopback
            or ip.is_link_local
            or ip.is_multicast
            or ip.is_reserved
            or ip.is_unspecified
        )
    except ValueError:
        # If we can't parse it, block it to be safe
        return True


async def validate_url_not_private(url: str) -> None:
    """
    Validate that a URL does not target a private/internal network.

    Resolves the hostname to check the actual IP address, preventing
    DNS rebinding attacks where a hostname resolves to an internal IP.
    Resolution runs on the event loop's resolver so concurrent fetches
    don't block each other.

    Raises:
        SSRFBlockedError: If the URL targets a private network.
        ValueError: If the URL is malformed or the hostname can't be resolved.
    """
    parsed = urlparse(url)
    hostname = parsed.hostname

    if not hostname:
        raise ValueError(f"Invalid URL (no hostname): {url}")

    if hostname.lower() in ('localhost', 'localhost.localdomain'):
        raise SSRFBlockedError(f"Blocked request to localhost: {url}")

    try:
        addrinfo = await asyncio.get_running_loop().getaddrinfo(
            hostname, None, family=socket.AF_UNSPEC, type=socket.SOCK_STREAM,
        )
    except socket.gaierror as e:
        raise ValueError(f"Could not resolve hostname: {hostname}") from e

    for _, _, _, _, sockaddr in addrinfo:
        ip_str = sockaddr[0]
        if is_private_ip(ip_str):
            raise SSRFBlockedError(
                f"Blocked request to private/internal address: {url} resolves to {ip_str}",
            )


@dataclass
class FetchedImage:
    """Result of fetching an image URL."""

    content: bytes | None
    final_url: str
    status_code: int | None
    content_type: str | None
    error: str | None

    @property
    def ok(self) -> bool:
        """Whether image bytes were retrieved."""
        return self.error is None and bool(self.content)


def _declared_length(response: httpx.Response) -> int | None:
    try:
        return int(response.headers['content-length'])
    except (KeyError, ValueError):
        return None


async def fetch_image(  # noqa: PLR0911
    url: str,
    timeout: float | None = None,  # noqa: ASYNC109
    max_bytes: int | None = None,
) -> FetchedImage:
    """
    Fetch the bytes of an image URL.

    Best-effort fetch that returns error info on failure rather than raising.
    Follows redirects and re-checks the final URL against private networks.
    The body is streamed: a declared Content-Length over the cap is rejected
    before reading, and reading stops as soon as the cap is passed.

    Args:
        url: Image URL to fetch.
        timeout: Request timeout in seconds; defaults to IMAGE_FETCH_TIMEOUT.
        max_bytes: Largest accepted body; defaults to MAX_IMAGE_BYTES.

    Returns:
        FetchedImage with the bytes, or with `error` set.
    """
    settings = get_settings()
    timeout = settings.image_fetch_timeout if timeout is None else timeout
    max_bytes = settings.max_image_bytes if max_bytes is None else max_bytes

    try:
        await validate_url_not_private(url)
    except (SSRFBlockedError, ValueError) as e:
        return FetchedImage(
            content=None, final_url=url, status_code=None, content_type=None, error=str(e),
        )

    try:
        async with httpx.AsyncClient(
            follow_redirects=True,
            timeout=timeout,
            headers={'User-Agent': USER_AGENT},
            http2=True,
        ) as client, client.stream('GET', url) as response:
            final_url = str(response.url)
            if final_url != url:
                try:
                    await validate_url_not_private(final_url)
                except (SSRFBlockedError, ValueError) as e:
                    return FetchedImage(
                        content=None,
                        final_url=final_url,
                        status_code=response.status_code,
                        content_type=None,
                        error=f"Redirect blocked: {e}",
                    )

            content_type = response.headers.get('content-type', '')
            if not response.is_success:
                return FetchedImage(
                    content=None,
                    final_url=final_url,
                    status_code=response.status_code,
                    content_type=content_type,
                    error=f"HTTP {response.status_code}",
                )

            # Servers that label the body get checked; unlabeled bodies are trusted
            # because the URL already passed the extension check
            if content_type and not content_type.lower().startswith('image/'):
                return FetchedImage(
                    content=None,
                    final_url=final_url,
                    status_code=response.status_code,
                    content_type=content_type,
                    error=f"Unsupported content type: {content_type}",
                )

            declared = _declared_length(response)
            if declared is not None and declared > max_bytes:
                return FetchedImage(
                    content=None,
                    final_url=final_url,
                    status_code=response.status_code,
                    content_type=content_type,
                    error=f"Image too large: {declared} bytes",
                )

            chunks: list[bytes] = []
            received = 0
            async for chunk in response.aiter_bytes():
                received += len(chunk)
                if received > max_bytes:
                    return FetchedImage(
                        content=None,
                        final_url=final_url,
                        status_code=response.status_code,
                        content_type=content_type,
                        error=f"Image too large: more than {max_bytes} bytes",
                    )
                chunks.append(chunk)

            return FetchedImage(
                content=b''.join(chunks),
                final_url=final_url,
                status_code=response.status_code,
                content_type=content_type or None,
                error=None,
            )
    except httpx.TimeoutException:
        return FetchedImage(
            content=None, final_url=url, status_code=None, content_type=None,
            error="Request timed out",
        )
    except httpx.RequestError as e:
        return FetchedImage(
            content=None, final_url=url, status_code=None, content_type=None,
            error=f"Request failed: {e}",
        )


async def fetch_image_if_valid(url: str | None) -> FetchedImage | None:
    """
    Fetch a bookmark image, skipping absent and non-image URLs.

    Returns None when there is nothing to archive; fetch failures are logged
    and also yield None.
    """
    if not url or not is_image_url(url):
        return None
    fetched = await fetch_image(url.strip())
    if not fetched.ok:
        logger.warning("Skipping image archival for %s: %s", url, fetched.error)
        return None
    return fetched


async def store_image(
    db: AsyncSession,
    owner_id: int,
    title: str | None,
    url: str,
    image: FetchedImage,
) -> StoredFile:
    """Persist a fetched image, named after the bookmark title and the URL extension."""
    return await storage_service.store_file(
        db,
        owner_id=owner_id,
        content=image.content,
        file_name=image_file_name(url, title),
        content_type=image.content_type,
    )
