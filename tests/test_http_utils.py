"""Tests for HTTP utilities module."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from dskclient.exceptions import NetworkError, NodeNotFound
from dskclient.http_utils import RETRY_STATUS_CODES, fetch_with_retries, ping


def _mock_client_class(mock_client_class: MagicMock, mock_client: AsyncMock) -> None:
    mock_client.__aenter__ = AsyncMock(return_value=mock_client)
    mock_client.__aexit__ = AsyncMock(return_value=None)
    mock_client_class.return_value = mock_client


class TestRetryStatusCodes:
    """Tests for RETRY_STATUS_CODES constant."""

    def test_contains_expected_codes(self) -> None:
        """Should contain all expected retryable status codes."""
        assert RETRY_STATUS_CODES == frozenset({429, 500, 502, 503, 504})


class TestFetchWithRetries:
    """Tests for fetch_with_retries function."""

    @pytest.mark.asyncio
    async def test_returns_text(self) -> None:
        """Returns the response body as text."""
        mock_response = MagicMock()
        mock_response.status_code = 200
        mock_response.text = '{"hello": "world"}'

        with patch("dskclient.http_utils.httpx.AsyncClient") as mock_client_class:
            mock_client = AsyncMock()
            mock_client.get = AsyncMock(return_value=mock_response)
            _mock_client_class(mock_client_class, mock_client)

            result = await fetch_with_retries("https://dsk.example/api/v2/hello")

        assert result == '{"hello": "world"}'

    @pytest.mark.asyncio
    async def test_passes_query_params(self) -> None:
        """Forwards query parameters to the request."""
        mock_response = MagicMock()
        mock_response.status_code = 200
        mock_response.text = "{}"

        mock_client = AsyncMock()
        mock_client.get = AsyncMock(return_value=mock_response)

        await fetch_with_retries(
            "https://dsk.example/api/v2/filter", client=mock_client, params={"q": "button"}
        )

        mock_client.get.assert_called_once_with(
            "https://dsk.example/api/v2/filter", params={"q": "button"}
        )

    @pytest.mark.asyncio
    async def test_raises_network_error_on_404(self) -> None:
        """Raises NetworkError on 404 with default message, without retrying."""
        mock_response = MagicMock()
        mock_response.status_code = 404

        mock_client = AsyncMock()
        mock_client.get = AsyncMock(return_value=mock_response)

        with pytest.raises(NetworkError, match="Resource not found"):
            await fetch_with_retries("https://dsk.example/api/v2/tree/nope", client=mock_client)

        assert mock_client.get.call_count == 1

    @pytest.mark.asyncio
    async def test_raises_custom_exception_on_404(self) -> None:
        """Raises custom exception class on 404 when specified."""

        class CustomError(Exception):
            pass

        mock_response = MagicMock()
        mock_response.status_code = 404

        mock_client = AsyncMock()
        mock_client.get = AsyncMock(return_value=mock_response)

        with pytest.raises(CustomError, match="Custom error"):
            await fetch_with_retries(
                "https://dsk.example",
                client=mock_client,
                on_404=CustomError,
                on_404_message="Custom error",
            )

    @pytest.mark.asyncio
    async def test_raises_node_not_found_when_requested(self) -> None:
        mock_response = MagicMock()
        mock_response.status_code = 404

        mock_client = AsyncMock()
        mock_client.get = AsyncMock(return_value=mock_response)

        with pytest.raises(NodeNotFound):
            await fetch_with_retries(
                "https://dsk.example/api/v2/tree/nope", client=mock_client, on_404=NodeNotFound
            )

    @pytest.mark.asyncio
    async def test_retries_on_503(self) -> None:
        """Retries on 503 status code."""
        fail_response = MagicMock()
        fail_response.status_code = 503

        success_response = MagicMock()
        success_response.status_code = 200
        success_response.text = "success"

        with (
            patch("dskclient.http_utils.DSK_FETCH_MAX_RETRIES", 2),
            patch("dskclient.http_utils.DSK_FETCH_BACKOFF_S", 0.01),
        ):
            mock_client = AsyncMock()
            mock_client.get = AsyncMock(side_effect=[fail_response, success_response])

            result = await fetch_with_retries("https://dsk.example", client=mock_client)

        assert result == "success"
        assert mock_client.get.call_count == 2

    @pytest.mark.asyncio
    async def test_raises_network_error_after_max_retries(self) -> None:
        """Raises NetworkError after exhausting retries."""
        fail_response = MagicMock()
        fail_response.status_code = 503

        with (
            patch("dskclient.http_utils.DSK_FETCH_MAX_RETRIES", 2),
            patch("dskclient.http_utils.DSK_FETCH_BACKOFF_S", 0.01),
        ):
            mock_client = AsyncMock()
            mock_client.get = AsyncMock(return_value=fail_response)

            with pytest.raises(NetworkError, match="Failed to fetch"):
                await fetch_with_retries("https://dsk.example", client=mock_client)

            # Initial attempt + 2 retries = 3 total
            assert mock_client.get.call_count == 3

    @pytest.mark.asyncio
    async def test_retries_on_request_error(self) -> None:
        """Retries on network request errors."""
        success_response = MagicMock()
        success_response.status_code = 200
        success_response.text = "success"

        with (
            patch("dskclient.http_utils.DSK_FETCH_MAX_RETRIES", 2),
            patch("dskclient.http_utils.DSK_FETCH_BACKOFF_S", 0.01),
        ):
            mock_client = AsyncMock()
            mock_client.get = AsyncMock(
                side_effect=[httpx.RequestError("Connection failed"), success_response]
            )

            result = await fetch_with_retries("https://dsk.example", client=mock_client)

        assert result == "success"

    @pytest.mark.asyncio
    async def test_client_has_correct_settings(self) -> None:
        """Creates client with correct timeout and redirect settings."""
        mock_response = MagicMock()
        mock_response.status_code = 200
        mock_response.text = "success"

        with patch("dskclient.http_utils.httpx.AsyncClient") as mock_client_class:
            mock_client = AsyncMock()
            mock_client.get = AsyncMock(return_value=mock_response)
            _mock_client_class(mock_client_class, mock_client)

            await fetch_with_retries("https://dsk.example")

            call_kwargs = mock_client_class.call_args[1]
            assert call_kwargs["follow_redirects"] is True
            assert call_kwargs["max_redirects"] == 5
            assert "timeout" in call_kwargs
            assert "User-Agent" in call_kwargs["headers"]


class TestPing:
    """Tests for the HEAD based existence check."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("status_code", "expected"),
        [(200, True), (301, True), (404, False), (403, False)],
    )
    async def test_maps_status_to_existence(self, status_code: int, expected: bool) -> None:
        mock_response = MagicMock()
        mock_response.status_code = status_code

        mock_client = AsyncMock()
        mock_client.head = AsyncMock(return_value=mock_response)

        assert await ping("https://dsk.example/api/v2/tree/a", client=mock_client) is expected

    @pytest.mark.asyncio
    async def test_raises_on_server_error(self) -> None:
        mock_response = MagicMock()
        mock_response.status_code = 500

        mock_client = AsyncMock()
        mock_client.head = AsyncMock(return_value=mock_response)

        with pytest.raises(NetworkError, match="HTTP 500"):
            await ping("https://dsk.example/api/v2/tree/a", client=mock_client)

    @pytest.mark.asyncio
    async def test_raises_on_transport_failure(self) -> None:
        mock_client = AsyncMock()
        mock_client.head = AsyncMock(side_effect=httpx.ConnectError("refused"))

        with pytest.raises(NetworkError, match="refused"):
            await ping("https://dsk.example/api/v2/tree/a", client=mock_client)
