"""
Tests for the GitHub file fetcher — HTTP outcomes map to present, absent or fatal.
"""

import httpx
import pytest

from app.core.errors import FileFetchUnavailable
from app.services.github_fetcher import GitHubFileFetcher, fetch_snapshot


def _fetcher(handler, token="secret"):
    return GitHubFileFetcher(token=token, transport=httpx.MockTransport(handler))


@pytest.mark.asyncio
async def test_fetches_raw_content():
    seen = []

    def handler(request):
        seen.append(request)
        return httpx.Response(200, text="# Readme")

    fetcher = _fetcher(handler)
    content = await fetcher.fetch_file("acme", "app", "README.md", "develop")

    assert content == "# Readme"
    assert seen[0].url.path == "/repos/acme/app/contents/README.md"
    assert seen[0].url.params["ref"] == "develop"


@pytest.mark.asyncio
async def test_missing_file_is_none():
    fetcher = _fetcher(lambda request: httpx.Response(404, json={"message": "Not Found"}))
    assert await fetcher.fetch_file("acme", "app", "LICENSE") is None


@pytest.mark.asyncio
async def test_server_error_is_none():
    fetcher = _fetcher(lambda request: httpx.Response(502))
    assert await fetcher.fetch_file("acme", "app", "LICENSE") is None


@pytest.mark.asyncio
async def test_network_error_is_none():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    fetcher = _fetcher(handler)
    assert await fetcher.fetch_file("acme", "app", "LICENSE") is None


@pytest.mark.asyncio
async def test_bad_credentials_are_fatal():
    fetcher = _fetcher(lambda request: httpx.Response(401))
    with pytest.raises(FileFetchUnavailable):
        await fetcher.fetch_file("acme", "app", "README.md")


@pytest.mark.asyncio
async def test_exhausted_rate_limit_is_fatal():
    fetcher = _fetcher(
        lambda request: httpx.Response(403, headers={"x-ratelimit-remaining": "0"})
    )
    with pytest.raises(FileFetchUnavailable):
        await fetcher.fetch_file("acme", "app", "README.md")


@pytest.mark.asyncio
async def test_token_sent_as_bearer():
    seen = []

    def handler(request):
        seen.append(request)
        return httpx.Response(404)

    fetcher = _fetcher(handler, token="abc123")
    await fetcher.fetch_file("acme", "app", "README.md")

    assert seen[0].headers["Authorization"] == "Bearer abc123"
    assert seen[0].headers["Accept"] == "application/vnd.github.raw"


@pytest.mark.asyncio
async def test_fetch_snapshot_marks_missing_files_absent(make_fetcher):
    fetcher = make_fetcher({"README.md": "hello", "package.json": "{}"})

    snapshot = await fetch_snapshot(fetcher, "acme", "app", "main", paths=("README.md", "package.json", "LICENSE"))

    assert dict(snapshot) == {"README.md": "hello", "package.json": "{}", "LICENSE": None}


@pytest.mark.asyncio
async def test_fetch_snapshot_propagates_unavailable(make_fetcher):
    fetcher = make_fetcher(error=FileFetchUnavailable("down"))
    with pytest.raises(FileFetchUnavailable):
        await fetch_snapshot(fetcher, "acme", "app")


@pytest.mark.asyncio
async def test_aclose_closes_client():
    fetcher = _fetcher(lambda request: httpx.Response(200, text="x"))
    await fetcher.aclose()
    assert fetcher.client.is_closed
