"""Mirror published prompts into a GitHub repository as Markdown files."""
import logging
import re
from collections import defaultdict
from collections.abc import Iterable
from datetime import UTC, datetime
from typing import TYPE_CHECKING

import yaml

from services.exceptions import InvalidStateError, PublishError, RemoteFileNotFoundError
from services.github_client import GitHubAPIError, GitHubContentsClient

if TYPE_CHECKING:
    from models.prompt import Prompt

logger = logging.getLogger(__name__)

PROMPTS_DIR = "prompts"
PROMPT_FILE_NAME = "prompt.md"
INDEX_PATH = "README.md"

_NON_ALNUM = re.compile(r"[^a-z0-9]+")


def generate_prompt_slug(name: str) -> str:
    """
    Derive the directory name for a prompt.

    Lower-cases the name, turns every run of characters outside [a-z0-9] into
    a single hyphen, and trims hyphens from both ends:
    "Code Review (v2)!" -> "code-review-v2".
    """
    return _NON_ALNUM.sub("-", name.lower()).strip("-")


def prompt_file_path(name: str) -> str:
    """
    Return the repository path of a prompt's published file.

    Raises:
        InvalidStateError: If the name contains no usable characters.
    """
    slug = generate_prompt_slug(name)
    if not slug:
        raise InvalidStateError(
            f"Cannot derive a publish path from prompt name '{name}'. "
            "Use at least one letter or digit.",
        )
    return f"{PROMPTS_DIR}/{slug}/{PROMPT_FILE_NAME}"


def _isoformat(value: datetime) -> str:
    # SQLite hands back naive datetimes; every stored timestamp is UTC
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return value.astimezone(UTC).isoformat().replace("+00:00", "Z")


def render_prompt_document(prompt: "Prompt") -> str:
    """
    Render a prompt as Markdown with YAML front matter.

    The front matter carries name, description, category, model (null when
    unset), createdAt, and updatedAt; the body is the raw prompt content.
    """
    front_matter = yaml.safe_dump(
        {
            "name": prompt.name,
            "description": prompt.description,
            "category": prompt.category,
            "model": prompt.model or None,
            "createdAt": _isoformat(prompt.created_at),
            "updatedAt": _isoformat(prompt.updated_at),
        },
        default_flow_style=False,
        allow_unicode=True,
        sort_keys=False,
    ).strip()

    body = prompt.content if prompt.content.endswith("\n") else f"{prompt.content}\n"
    return f"---\n{front_matter}\n---\n\n{body}"


def render_index(prompts: Iterable["Prompt"]) -> str:
    """
    Render the README listing every published prompt.

    Sections are per category in ascending order; prompts within a category
    are sorted by name. Unpublished records in ``prompts`` are ignored.
    """
    published = [p for p in prompts if p.is_published]

    lines = [
        "# Prompts Repository",
        "",
        "This repository contains a collection of AI prompts organized by category.",
        "",
        "## Available Prompts",
        "",
        f"Total prompts: {len(published)}",
        "",
    ]

    if not published:
        lines.append("*No prompts published yet.*")
        return "\n".join(lines) + "\n"

    by_category: dict[str, list[Prompt]] = defaultdict(list)
    for prompt in published:
        by_category[prompt.category].append(prompt)

    for category in sorted(by_category):
        lines += [f"### {category}", ""]
        for prompt in sorted(by_category[category], key=lambda p: p.name):
            path = prompt.github_path or prompt_file_path(prompt.name)
            lines += [
                f"#### [{prompt.name}](./{path})",
                "",
                prompt.description,
                "",
                f"- **Model**: {prompt.model or 'Not specified'}",
                f"- **Updated**: {_isoformat(prompt.updated_at)[:10]}",
                "",
            ]

    lines += [
        "",
        "---",
        "",
        "*This README is automatically generated when prompts are published.*",
    ]
    return "\n".join(lines) + "\n"


class PublishService:
    """
    Write, refresh, and remove published prompt files plus the README index.

    GitHub holds no publish flag of its own: a prompt is published when its
    file exists. Tracking that state on the Prompt row is the caller's job.
    """

    def __init__(self, contents: GitHubContentsClient) -> None:
        self.contents = contents

    async def publish(self, prompt: "Prompt") -> str:
        """
        Create the prompt's file in the repository.

        Returns:
            The repository path of the new file.

        Raises:
            InvalidStateError: If no path can be derived from the prompt name.
            PublishError: If GitHub rejects the write (including an existing
                file at the same path).
        """
        path = prompt_file_path(prompt.name)
        try:
            await self.contents.put_file(
                path,
                render_prompt_document(prompt),
                message=f"Publish prompt: {prompt.name}",
            )
        except GitHubAPIError as e:
            logger.error("Error publishing prompt %s to %s: %s", prompt.id, path, e)
            raise PublishError("Failed to publish prompt to GitHub") from e
        logger.info("Published prompt %s to %s", prompt.id, path)
        return path

    async def update_published(self, prompt: "Prompt", path: str | None) -> None:
        """
        Overwrite an already published file with the prompt's current state.

        The path is the one stored at publish time; it is never recomputed from
        the (possibly renamed) prompt.

        Raises:
            InvalidStateError: If the prompt is not published or has no path.
            RemoteFileNotFoundError: If the file no longer exists.
            PublishError: On a SHA conflict or any other GitHub failure.
        """
        if not prompt.is_published or not path:
            raise InvalidStateError("Prompt is not published")

        try:
            existing = await self.contents.get_file(path)
            if existing is None:
                raise RemoteFileNotFoundError(path)
            await self.contents.put_file(
                path,
                render_prompt_document(prompt),
                message=f"Update prompt: {prompt.name}",
                sha=existing.sha,
            )
        except GitHubAPIError as e:
            logger.error("Error updating published prompt %s at %s: %s", prompt.id, path, e)
            raise PublishError("Failed to update prompt in GitHub") from e

    async def unpublish(self, path: str) -> None:
        """
        Delete a published file.

        Raises:
            RemoteFileNotFoundError: If the file does not exist.
            PublishError: On any other GitHub failure.
        """
        try:
            existing = await self.contents.get_file(path)
            if existing is None:
                raise RemoteFileNotFoundError(path)
            await self.contents.delete_file(
                path,
                message="Remove prompt from repository",
                sha=existing.sha,
            )
        except GitHubAPIError as e:
            logger.error("Error deleting published prompt at %s: %s", path, e)
            raise PublishError("Failed to delete prompt from GitHub") from e
        logger.info("Removed published file %s", path)

    async def regenerate_index(self, prompts: Iterable["Prompt"]) -> None:
        """
        Rewrite the README from the given published prompts.

        A missing README is created; an existing one is overwritten using its
        current SHA.

        Raises:
            PublishError: If GitHub rejects the read or write.
        """
        content = render_index(prompts)
        try:
            existing = await self.contents.get_file(INDEX_PATH)
            if existing is None:
                logger.info("%s not found, creating new one", INDEX_PATH)
            await self.contents.put_file(
                INDEX_PATH,
                content,
                message="Update README with prompt listings",
                sha=existing.sha if existing else None,
            )
        except GitHubAPIError as e:
            raise PublishError("Failed to update README") from e
