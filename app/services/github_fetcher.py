"""
GitHub File Fetcher — Builds a FileSnapshot from a repository on GitHub.

Individual fetch failures are recorded as absent files. Only a systemic
failure (bad credentials, exhausted rate limit) aborts the snapshot.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Protocol

import httpx

from app.config import settings
from app.core.errors import FileFetchError, FileFetchUnavailable
from app.models.snapshot import FileSnapshot

logger = logging.getLogger("storecheck.services.github")

RAW_MEDIA_TYPE = "application/vnd.github.raw"

TARGET_FILES: tuple[str, ...] = (
    # Core documentation
    "README.md",
    "LICENSE",
    # Mobile app files
    "package.json",
    "app.json",
    "app.config.js",
    "AndroidManifest.xml",
    "Info.plist",
    "build.gradle",
    "app/build.gradle",
    # Chrome extension
    "manifest.json",
    # Privacy and legal
    "privacy-policy.md",
    "PRIVACY.md",
    "terms-of-service.md",
    "TERMS.md",
    "COMMUNITY_GUIDELINES.md",
    # Security configs
    "network_security_config.xml",
    "res/xml/network_security_config.xml",
    "PrivacyInfo.xcprivacy",
    # Resources
    "strings.xml",
    "res/values/strings.xml",
)


class FileFetcher(Protocol):
    """Returns a file's text, or None when it cannot be read."""

    async def fetch_file(
        self, owner: str, repo: str, path: str, branch: str | None = None
    ) -> str | None: ...


class GitHubFileFetcher:
    """Reads files through the GitHub REST contents API."""

    def __init__(
        self,
        token: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        token = settings.github_token if token is None else token
        headers = {
            "Accept": RAW_MEDIA_TYPE,
            "X-GitHub-Api-Version": "2022-11-28",
        }
        if token:
            headers["Authorization"] = f"Bearer {token}"
        self.client = httpx.AsyncClient(
            base_url=settings.github_api_url,
            headers=headers,
            timeout=settings.github_timeout,
            transport=transport,
        )

    async def fetch_file(
        self, owner: str, repo: str, path: str, branch: str | None = None
    ) -> str | None:
        """
        Raw content of ``path``, or None if missing or unreadable.

        Raises:
            FileFetchUnavailable: GitHub rejected the credentials or the
                rate limit is exhausted; no further file will succeed.
        """
        try:
            return await self._get(owner, repo, path, branch)
        except FileFetchError as e:
            logger.warning(str(e))
            return None

    async def _get(self, owner: str, repo: str, path: str, branch: str | None) -> str | None:
        params = {"ref": branch} if branch else None
        try:
            response = await self.client.get(
                f"/repos/{owner}/{repo}/contents/{path}", params=params
            )
        except httpx.HTTPError as e:
            raise FileFetchError(f"Fetching {owner}/{repo}:{path} failed: {e}") from e

        if response.status_code == 404:
            logger.debug(f"Not found: {owner}/{repo}:{path}")
            return None
        if response.status_code == 401 or _rate_limited(response):
            raise FileFetchUnavailable(
                f"GitHub refused {owner}/{repo} (HTTP {response.status_code})"
            )
        if response.is_error:
            raise FileFetchError(
                f"Fetching {owner}/{repo}:{path} returned HTTP {response.status_code}"
            )
        return response.text

    async def aclose(self) -> None:
        await self.client.aclose()


def _rate_limited(response: httpx.Response) -> bool:
    return (
        response.status_code in (403, 429)
        and response.headers.get("x-ratelimit-remaining") == "0"
    )


async def fetch_snapshot(
    fetcher: FileFetcher,
    owner: str,
    repo: str,
    branch: str | None = None,
    paths: tuple[str, ...] = TARGET_FILES,
) -> FileSnapshot:
    """
    Fetch every target file concurrently into a snapshot.

    A failed single fetch is recorded as absent. FileFetchUnavailable
    propagates to the caller.
    """

    async def fetch_one(path: str) -> str | None:
        try:
            return await fetcher.fetch_file(owner, repo, path, branch)
        except FileFetchUnavailable:
            raise
        except Exception as e:
            logger.warning(f"Fetching {path} from {owner}/{repo} failed: {e}")
            return None

    contents = await asyncio.gather(*(fetch_one(path) for path in paths))
    snapshot = FileSnapshot(dict(zip(paths, contents)))
    logger.info(
        f"Fetched {len(snapshot.present_paths())}/{len(paths)} files "
        f"from {owner}/{repo}@{branch or 'default'}"
    )
    return snapshot
