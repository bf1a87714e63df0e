"""Minimal async client for the GitHub repository contents API."""
import base64
import logging
from dataclasses import dataclass
from typing import Any

import httpx

from core.config import Settings

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10.0
USER_AGENT = "prompt-library-publisher/1.0"
GITHUB_API_VERSION = "2022-11-28"


class GitHubAPIError(Exception):
    """Raised when the GitHub API returns an error or cannot be reached."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.status_code = status_code
        super().__init__(message)


@dataclass
class RemoteFile:
    """A file as returned by the contents API."""

    path: str
    sha: str  # Blob SHA; required by GitHub to update or delete the file
    content: str


class GitHubContentsClient:
    """
    Read, write, and delete single files in one GitHub repository.

    Each call makes exactly one request; there is no retry. Conflicting writes
    (stale or missing SHA) are reported by GitHub as 409/422 and surface as
    GitHubAPIError.
    """

    def __init__(
        self,
        token: str,
        owner: str,
        repo: str,
        branch: str | None = None,
        api_url: str = "https://api.github.com",
        timeout: float = DEFAULT_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.owner = owner
        self.repo = repo
        self.branch = branch
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout
        self._token = token
        self._transport = transport

    @classmethod
    def from_settings(cls, settings: Settings) -> "GitHubContentsClient":
        """Build a client for the repository configured in settings."""
        return cls(
            token=settings.github_token,
            owner=settings.github_owner,
            repo=settings.github_repo,
            branch=settings.github_branch,
            api_url=settings.github_api_url,
            timeout=settings.github_timeout,
        )

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.api_url,
            timeout=self.timeout,
            transport=self._transport,
            headers={
                "Accept": "application/vnd.github+json",
                "Authorization": f"Bearer {self._token}",
                "User-Agent": USER_AGENT,
                "X-GitHub-Api-Version": GITHUB_API_VERSION,
            },
        )

    def _contents_url(self, path: str) -> str:
        return f"/repos/{self.owner}/{self.repo}/contents/{path.lstrip('/')}"

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, str] | None = None,
        json: dict[str, Any] | None = None,
    ) -> httpx.Response:
        try:
            async with self._client() as client:
                return await client.request(
                    method, self._contents_url(path), params=params, json=json,
                )
        except httpx.HTTPError as e:
            raise GitHubAPIError(f"GitHub request failed: {method} {path}: {e}") from e

    @staticmethod
    def _raise_for_status(response: httpx.Response, action: str) -> None:
        if response.is_success:
            return
        detail = response.text
        try:
            data = response.json()
        except ValueError:
            data = None
        if isinstance(data, dict) and data.get("message"):
            detail = data["message"]
        raise GitHubAPIError(
            f"GitHub {action} failed ({response.status_code}): {detail}",
            status_code=response.status_code,
        )

    async def get_file(self, path: str) -> RemoteFile | None:
        """
        Fetch a file and its SHA.

        Returns:
            The file, or None if nothing (or a directory) exists at ``path``.

        Raises:
            GitHubAPIError: On any other failure.
        """
        params = {"ref": self.branch} if self.branch else None
        response = await self._request("GET", path, params=params)
        if response.status_code == 404:
            return None
        self._raise_for_status(response, f"read of {path}")

        data = response.json()
        # Directories come back as a JSON list
        if not isinstance(data, dict) or data.get("type") != "file":
            return None

        raw = data.get("content") or ""
        content = base64.b64decode(raw).decode("utf-8") if raw else ""
        return RemoteFile(path=data.get("path", path), sha=data["sha"], content=content)

    async def put_file(
        self,
        path: str,
        content: str,
        message: str,
        sha: str | None = None,
    ) -> str:
        """
        Create or update a file.

        Args:
            path: Repository path of the file.
            content: New file text.
            message: Commit message.
            sha: Current blob SHA; required when the file already exists.

        Returns:
            The SHA of the written blob.

        Raises:
            GitHubAPIError: On conflict or any other failure.
        """
        body: dict[str, Any] = {
            "message": message,
            "content": base64.b64encode(content.encode("utf-8")).decode("ascii"),
        }
        if sha is not None:
            body["sha"] = sha
        if self.branch:
            body["branch"] = self.branch

        response = await self._request("PUT", path, json=body)
        self._raise_for_status(response, f"write of {path}")
        return response.json()["content"]["sha"]

    async def delete_file(self, path: str, message: str, sha: str) -> None:
        """
        Delete a file.

        Raises:
            GitHubAPIError: On conflict or any other failure.
        """
        body: dict[str, Any] = {"message": message, "sha": sha}
        if self.branch:
            body["branch"] = self.branch

        response = await self._request("DELETE", path, json=body)
        self._raise_for_status(response, f"delete of {path}")
