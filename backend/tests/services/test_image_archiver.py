"""Tests for bookmark image fetching."""
import asyncio
from collections.abc import AsyncIterator, Generator
from unittest.mock import AsyncMock, patch

import httpx
import pytest
import respx

from services.image_archiver import (
    SSRFBlockedError,
    fetch_image,
    fetch_image_if_valid,
    image_extension,
    image_file_name,
    is_image_url,
    is_private_ip,
    validate_url_not_private,
)

IMAGE_URL = "https://cdn.example.com/images/hero.png"
PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 16


@pytest.fixture
def allow_all_hosts() -> Generator[AsyncMock]:
    """Skip DNS resolution in the private-network check."""
    with patch(
        "services.image_archiver.validate_url_not_private",
        new_callable=AsyncMock,
    ) as mock:
        yield mock


class TestIsImageUrl:
    """Tests for recognizing image URLs by extension."""

    @pytest.mark.parametrize(
        "url",
        [
            "https://example.com/a.png",
            "http://example.com/path/photo.JPG",
            "https://example.com/favicon.ico?v=2",
            "https://example.com/logo.svg",
            "https://example.com/pic.webp",
        ],
    )
    def test_image_urls(self, url: str) -> None:
        assert is_image_url(url) is True

    @pytest.mark.parametrize(
        "url",
        [
            None,
            "",
            "https://example.com/page.html",
            "https://example.com/",
            "ftp://example.com/a.png",
            "https://example.com/png",
            "not a url.png",
        ],
    )
    def test_non_image_urls(self, url: str | None) -> None:
        assert is_image_url(url) is False


class TestImageFileName:
    """Tests for building stored image file names."""

    def test_extension_is_lowercased(self) -> None:
        assert image_extension("https://example.com/a/Photo.JPEG?x=1") == "jpeg"

    def test_name_from_title(self) -> None:
        assert image_file_name(IMAGE_URL, "How to Write Tests!") == "how-to-write-tests.png"

    def test_missing_title(self) -> None:
        assert image_file_name(IMAGE_URL, None) == "untitled.png"


class TestPrivateNetworkChecks:
    """Tests for the private-network guard."""

    @pytest.mark.parametrize("ip", ["127.0.0.1", "10.0.0.1", "192.168.1.1", "::1", "169.254.1.1"])
    def test_private_ips(self, ip: str) -> None:
        assert is_private_ip(ip) is True

    def test_public_ip(self) -> None:
        assert is_private_ip("93.184.216.34") is False

    def test_unparseable_ip_is_blocked(self) -> None:
        assert is_private_ip("not-an-ip") is True

    async def test_localhost_blocked(self) -> None:
        with pytest.raises(SSRFBlockedError):
            await validate_url_not_private("http://localhost/a.png")

    async def test_hostname_resolving_to_private_ip_blocked(self) -> None:
        addrinfo = [(2, 1, 6, "", ("10.1.2.3", 0))]
        loop = asyncio.get_running_loop()
        with (
            patch.object(loop, "getaddrinfo", new=AsyncMock(return_value=addrinfo)),
            pytest.raises(SSRFBlockedError, match="10.1.2.3"),
        ):
            await validate_url_not_private("https://internal.example.com/a.png")

    async def test_hostname_resolving_to_public_ip_allowed(self) -> None:
        addrinfo = [(2, 1, 6, "", ("93.184.216.34", 0))]
        loop = asyncio.get_running_loop()
        with patch.object(loop, "getaddrinfo", new=AsyncMock(return_value=addrinfo)):
            await validate_url_not_private("https://cdn.example.com/a.png")

    async def test_missing_hostname(self) -> None:
        with pytest.raises(ValueError, match="no hostname"):
            await validate_url_not_private("https:///a.png")


class TestFetchImage:
    """Tests for fetching image bytes."""

    @respx.mock
    async def test_success(self, allow_all_hosts: AsyncMock) -> None:
        respx.get(IMAGE_URL).mock(
            return_value=httpx.Response(
                200, content=PNG_BYTES, headers={"content-type": "image/png"},
            ),
        )

        result = await fetch_image(IMAGE_URL)

        assert result.ok
        assert result.content == PNG_BYTES
        assert result.content_type == "image/png"
        assert result.status_code == 200

    @respx.mock
    async def test_http_error(self, allow_all_hosts: AsyncMock) -> None:
        respx.get(IMAGE_URL).mock(return_value=httpx.Response(404))

        result = await fetch_image(IMAGE_URL)

        assert not result.ok
        assert result.error == "HTTP 404"

    @respx.mock
    async def test_non_image_content_type(self, allow_all_hosts: AsyncMock) -> None:
        respx.get(IMAGE_URL).mock(
            return_value=httpx.Response(
                200, content=b"<html></html>", headers={"content-type": "text/html"},
            ),
        )

        result = await fetch_image(IMAGE_URL)

        assert not result.ok
        assert "Unsupported content type" in result.error

    @respx.mock
    async def test_too_large(self, allow_all_hosts: AsyncMock) -> None:
        respx.get(IMAGE_URL).mock(
            return_value=httpx.Response(
                200, content=b"x" * 100, headers={"content-type": "image/png"},
            ),
        )

        result = await fetch_image(IMAGE_URL, max_bytes=10)

        assert not result.ok
        assert "too large" in result.error

    @respx.mock
    async def test_chunked_body_stops_reading_past_cap(self, allow_all_hosts: AsyncMock) -> None:
        """Without a Content-Length the body is read only until the cap is passed."""
        chunk_size = 10_000
        served = 0

        async def chunks() -> AsyncIterator[bytes]:
            nonlocal served
            for _ in range(100):
                served += chunk_size
                yield b"x" * chunk_size

        respx.get(IMAGE_URL).mock(
            return_value=httpx.Response(
                200, content=chunks(), headers={"content-type": "image/png"},
            ),
        )

        result = await fetch_image(IMAGE_URL, max_bytes=1_000)

        assert not result.ok
        assert "too large" in result.error
        assert served <= 2 * chunk_size

    @respx.mock
    async def test_declared_length_over_cap_rejected_before_reading(
        self,
        allow_all_hosts: AsyncMock,
    ) -> None:
        served = 0

        async def chunks() -> AsyncIterator[bytes]:
            nonlocal served
            served += 1
            yield b"x" * 5_000

        respx.get(IMAGE_URL).mock(
            return_value=httpx.Response(
                200,
                content=chunks(),
                headers={"content-type": "image/png", "content-length": "5000"},
            ),
        )

        result = await fetch_image(IMAGE_URL, max_bytes=1_000)

        assert result.error == "Image too large: 5000 bytes"
        assert served == 0

    @respx.mock
    async def test_chunked_body_within_cap(self, allow_all_hosts: AsyncMock) -> None:
        async def chunks() -> AsyncIterator[bytes]:
            yield PNG_BYTES[:8]
            yield PNG_BYTES[8:]

        respx.get(IMAGE_URL).mock(
            return_value=httpx.Response(
                200, content=chunks(), headers={"content-type": "image/png"},
            ),
        )

        result = await fetch_image(IMAGE_URL, max_bytes=1_000)

        assert result.ok
        assert result.content == PNG_BYTES

    @respx.mock
    async def test_timeout(self, allow_all_hosts: AsyncMock) -> None:
        respx.get(IMAGE_URL).mock(side_effect=httpx.ConnectTimeout("timed out"))

        result = await fetch_image(IMAGE_URL)

        assert not result.ok
        assert result.error == "Request timed out"

    @respx.mock
    async def test_connection_error(self, allow_all_hosts: AsyncMock) -> None:
        respx.get(IMAGE_URL).mock(side_effect=httpx.ConnectError("refused"))

        result = await fetch_image(IMAGE_URL)

        assert not result.ok
        assert result.error.startswith("Request failed")

    @respx.mock
    async def test_redirect_to_private_network_blocked(self, allow_all_hosts: AsyncMock) -> None:
        redirect_target = "http://10.0.0.5/hero.png"
        respx.get(IMAGE_URL).mock(
            return_value=httpx.Response(302, headers={"location": redirect_target}),
        )
        respx.get(redirect_target).mock(
            return_value=httpx.Response(
                200, content=PNG_BYTES, headers={"content-type": "image/png"},
            ),
        )
        allow_all_hosts.side_effect = [None, SSRFBlockedError("private")]

        result = await fetch_image(IMAGE_URL)

        assert not result.ok
        assert result.error.startswith("Redirect blocked")

    async def test_private_url_not_requested(self) -> None:
        with respx.mock(assert_all_called=False) as router:
            route = router.get("http://localhost/a.png")
            result = await fetch_image("http://localhost/a.png")

        assert not result.ok
        assert not route.called


class TestFetchImageIfValid:
    """Tests for the archival entry point."""

    async def test_skips_missing_url(self) -> None:
        with patch("services.image_archiver.fetch_image") as mock_fetch:
            assert await fetch_image_if_valid(None) is None
        mock_fetch.assert_not_called()

    async def test_skips_non_image_url(self) -> None:
        with patch("services.image_archiver.fetch_image") as mock_fetch:
            assert await fetch_image_if_valid("https://example.com/article") is None
        mock_fetch.assert_not_called()

    @respx.mock
    async def test_failed_fetch_returns_none(self, allow_all_hosts: AsyncMock) -> None:
        respx.get(IMAGE_URL).mock(return_value=httpx.Response(500))
        assert await fetch_image_if_valid(IMAGE_URL) is None

    @respx.mock
    async def test_returns_fetched_image(self, allow_all_hosts: AsyncMock) -> None:
        respx.get(IMAGE_URL).mock(
            return_value=httpx.Response(
                200, content=PNG_BYTES, headers={"content-type": "image/png"},
            ),
        )

        result = await fetch_image_if_valid(f"  {IMAGE_URL}  ")

        assert result is not None
        assert result.content == PNG_BYTES
