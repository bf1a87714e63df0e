"""Tests for the GitHub contents API client."""
import base64
import json
from collections.abc import Generator

import httpx
import pytest
import respx

from core.config import Settings
from services.github_client import GitHubAPIError, GitHubContentsClient

API_URL = "https://api.github.test"
FILE_URL = "/repos/acme/prompts/contents/prompts/greeting/prompt.md"


def _b64(text: str) -> str:
    return base64.b64encode(text.encode("utf-8")).decode("ascii")


@pytest.fixture
def mock_github() -> Generator[respx.MockRouter]:
    """Mock the GitHub REST API."""
    with respx.mock(base_url=API_URL, assert_all_called=False) as respx_mock:
        yield respx_mock


@pytest.fixture
def contents_client() -> GitHubContentsClient:
    """Client for acme/prompts on the default branch."""
    return GitHubContentsClient(token="ghp_test", owner="acme", repo="prompts", api_url=API_URL)


async def test__get_file__decodes_content_and_sha(
    mock_github: respx.MockRouter,
    contents_client: GitHubContentsClient,
) -> None:
    """The base64 body is decoded and the blob SHA returned."""
    route = mock_github.get(FILE_URL).mock(
        return_value=httpx.Response(
            200,
            json={
                "type": "file",
                "path": "prompts/greeting/prompt.md",
                "sha": "abc123",
                "content": _b64("---\nname: Greeting\n---\n\nHello!\n"),
            },
        ),
    )

    remote = await contents_client.get_file("prompts/greeting/prompt.md")

    assert remote is not None
    assert remote.sha == "abc123"
    assert remote.content == "---\nname: Greeting\n---\n\nHello!\n"
    request = route.calls.last.request
    assert request.headers["Authorization"] == "Bearer ghp_test"
    assert request.headers["Accept"] == "application/vnd.github+json"
    assert "ref" not in request.url.params


async def test__get_file__not_found_returns_none(
    mock_github: respx.MockRouter,
    contents_client: GitHubContentsClient,
) -> None:
    """A 404 means the file does not exist."""
    mock_github.get(FILE_URL).mock(
        return_value=httpx.Response(404, json={"message": "Not Found"}),
    )

    assert await contents_client.get_file("prompts/greeting/prompt.md") is None


async def test__get_file__directory_returns_none(
    mock_github: respx.MockRouter,
    contents_client: GitHubContentsClient,
) -> None:
    """A directory listing is not a file."""
    mock_github.get(FILE_URL).mock(return_value=httpx.Response(200, json=[]))

    assert await contents_client.get_file("prompts/greeting/prompt.md") is None


async def test__get_file__branch_sent_as_ref(mock_github: respx.MockRouter) -> None:
    """A configured branch is read via the ref query parameter."""
    client = GitHubContentsClient(
        token="t", owner="acme", repo="prompts", branch="main", api_url=API_URL,
    )
    route = mock_github.get(FILE_URL).mock(return_value=httpx.Response(404))

    await client.get_file("prompts/greeting/prompt.md")

    assert route.calls.last.request.url.params["ref"] == "main"


async def test__get_file__server_error_raises(
    mock_github: respx.MockRouter,
    contents_client: GitHubContentsClient,
) -> None:
    """Non-404 failures carry the status code and GitHub's message."""
    mock_github.get(FILE_URL).mock(
        return_value=httpx.Response(500, json={"message": "Server Error"}),
    )

    with pytest.raises(GitHubAPIError, match="Server Error") as exc_info:
        await contents_client.get_file("prompts/greeting/prompt.md")

    assert exc_info.value.status_code == 500


async def test__get_file__network_error_raises(
    mock_github: respx.MockRouter,
    contents_client: GitHubContentsClient,
) -> None:
    """Transport failures are wrapped, not leaked as httpx errors."""
    mock_github.get(FILE_URL).mock(side_effect=httpx.ConnectError("connection refused"))

    with pytest.raises(GitHubAPIError) as exc_info:
        await contents_client.get_file("prompts/greeting/prompt.md")

    assert exc_info.value.status_code is None


async def test__put_file__sends_base64_content_and_sha(
    mock_github: respx.MockRouter,
) -> None:
    """Updates send the current SHA and the target branch."""
    client = GitHubContentsClient(
        token="t", owner="acme", repo="prompts", branch="main", api_url=API_URL,
    )
    route = mock_github.put(FILE_URL).mock(
        return_value=httpx.Response(200, json={"content": {"sha": "new-sha"}}),
    )

    new_sha = await client.put_file(
        "prompts/greeting/prompt.md", "Hello!\n", "Update prompt: Greeting", sha="old-sha",
    )

    assert new_sha == "new-sha"
    body = json.loads(route.calls.last.request.content)
    assert body == {
        "message": "Update prompt: Greeting",
        "content": _b64("Hello!\n"),
        "sha": "old-sha",
        "branch": "main",
    }


async def test__put_file__create_omits_sha(
    mock_github: respx.MockRouter,
    contents_client: GitHubContentsClient,
) -> None:
    """New files are created without a SHA."""
    route = mock_github.put(FILE_URL).mock(
        return_value=httpx.Response(201, json={"content": {"sha": "s1"}}),
    )

    await contents_client.put_file("prompts/greeting/prompt.md", "x", "Publish prompt: Greeting")

    body = json.loads(route.calls.last.request.content)
    assert "sha" not in body
    assert "branch" not in body


async def test__put_file__conflict_raises(
    mock_github: respx.MockRouter,
    contents_client: GitHubContentsClient,
) -> None:
    """A stale SHA is reported by GitHub as 409."""
    mock_github.put(FILE_URL).mock(
        return_value=httpx.Response(409, json={"message": "does not match"}),
    )

    with pytest.raises(GitHubAPIError) as exc_info:
        await contents_client.put_file("prompts/greeting/prompt.md", "x", "m", sha="stale")

    assert exc_info.value.status_code == 409


async def test__delete_file__sends_sha(
    mock_github: respx.MockRouter,
    contents_client: GitHubContentsClient,
) -> None:
    """Deletes carry the commit message and blob SHA."""
    route = mock_github.delete(FILE_URL).mock(return_value=httpx.Response(200, json={}))

    await contents_client.delete_file(
        "prompts/greeting/prompt.md", "Remove prompt from repository", sha="abc123",
    )

    body = json.loads(route.calls.last.request.content)
    assert body == {"message": "Remove prompt from repository", "sha": "abc123"}


def test__from_settings__uses_configured_repository() -> None:
    """The client targets the repository named in settings."""
    settings = Settings(
        database_url="sqlite+aiosqlite:///:memory:",
        github_token="ghp_x",
        github_owner="acme",
        github_repo="prompts",
        github_branch="release",
        github_api_url="https://github.example.com/api/v3/",
    )

    client = GitHubContentsClient.from_settings(settings)

    assert (client.owner, client.repo, client.branch) == ("acme", "prompts", "release")
    assert client.api_url == "https://github.example.com/api/v3"
