"""MCP tool handlers.

Each handler validates its arguments with a pydantic model and always
returns a ToolResponse; nothing here raises for bad input.
"""

from __future__ import annotations

import logging
import re
from typing import Any

from pydantic import BaseModel, StrictStr, ValidationError

from .config import ShadowGitConfig
from .gateway import GitExecutor, RepositoryResolver
from .responses import (
    NO_REPOSITORIES,
    RULE,
    ToolResponse,
    error_response,
    repo_not_found_response,
    repository_overview,
    text_response,
    workflow_hint,
)
from .session_client import SessionClient
from .types import InvocationTrust

logger = logging.getLogger(__name__)

HINT_COMMANDS = ("diff", "status", "log", "blame")
_COMMIT_HASH_RE = re.compile(r"\[[^\]]* ([0-9a-f]{7,40})\]")


class GitCommandArgs(BaseModel):
    repo: StrictStr
    command: StrictStr


class CheckpointArgs(BaseModel):
    repo: StrictStr
    title: StrictStr
    message: StrictStr | None = None
    author: StrictStr | None = None


class StartSessionArgs(BaseModel):
    repo: StrictStr
    description: StrictStr


class EndSessionArgs(BaseModel):
    sessionId: StrictStr
    commitHash: StrictStr | None = None


def _parse(model: type[BaseModel], args: Any) -> Any:
    try:
        return model.model_validate(args if args is not None else {})
    except ValidationError:
        return None


def author_email(author: str) -> str:
    return re.sub(r"\s+", "-", author.lower()) + "@shadowgit.local"


def extract_commit_hash(commit_output: str) -> str | None:
    """Pull the short hash out of ``[branch abc1234] title``."""
    match = _COMMIT_HASH_RE.search(commit_output)
    return match.group(1) if match else None


class ToolHandlers:
    """Implements list_repos, git_command, checkpoint, start_session and end_session."""

    def __init__(
        self,
        resolver: RepositoryResolver,
        executor: GitExecutor,
        session_client: SessionClient,
        config: ShadowGitConfig | None = None,
    ):
        self.resolver = resolver
        self.executor = executor
        self.session_client = session_client
        self.config = config or ShadowGitConfig()

    async def list_repos(self, args: Any = None) -> ToolResponse:
        repos = self.resolver.repositories
        if not repos:
            return text_response(NO_REPOSITORIES)
        return text_response(repository_overview(repos))

    async def git_command(self, args: Any) -> ToolResponse:
        parsed = _parse(GitCommandArgs, args)
        if parsed is None:
            return error_response(
                "Error: Both 'repo' and 'command' parameters are required.",
                "Example usage:\n"
                '  git_command({repo: "my-project", command: "log --oneline -10"})\n'
                '  git_command({repo: "my-project", command: "diff HEAD~1"})\n\n'
                "Use list_repos() to see available repositories.",
            )

        repo = self.resolver.resolve(parsed.repo)
        if repo is None:
            return repo_not_found_response(parsed.repo, self.resolver.repositories)

        outcome = await self.executor.execute(parsed.command, repo, InvocationTrust.EXTERNAL)
        output = outcome.render()

        lowered = parsed.command.lower()
        if self.config.hints and any(cmd in lowered for cmd in HINT_COMMANDS):
            output = f"{output}\n\n{workflow_hint(parsed.repo)}"
        return ToolResponse(text=output, success=outcome.ok)

    async def checkpoint(self, args: Any) -> ToolResponse:
        parsed = _parse(CheckpointArgs, args)
        if parsed is None:
            return error_response(
                "Error: Both 'repo' and 'title' parameters are required.",
                "Example usage:\n"
                "  checkpoint({\n"
                '    repo: "my-project",\n'
                '    title: "Fix authentication bug",\n'
                '    author: "Claude"\n'
                "  })\n\n"
                "Use list_repos() to see available repositories.",
            )

        limits = self.config.checkpoint
        if len(parsed.title) > limits.max_title_length:
            return error_response(
                f"Error: Title must be {limits.max_title_length} characters or less "
                f"(current: {len(parsed.title)} chars)."
            )
        if parsed.message and len(parsed.message) > limits.max_message_length:
            return error_response(
                f"Error: Message must be {limits.max_message_length} characters or less "
                f"(current: {len(parsed.message)} chars)."
            )

        repo = self.resolver.resolve(parsed.repo)
        if repo is None:
            repos = self.resolver.repositories
            if not repos:
                return error_response(
                    "Error: No repositories found. Please add repositories to ShadowGit first."
                )
            listing = "\n".join(f"  - {r.name}: {r.path}" for r in repos)
            return error_response(
                f"Error: Repository '{parsed.repo}' not found.",
                f"Available repositories:\n{listing}",
            )

        internal = InvocationTrust.INTERNAL

        status = await self.executor.execute(["status", "--porcelain"], repo, internal)
        if not status.ok:
            return self._checkpoint_failure("Failed to Check Repository Status", status.render())
        if not (status.output or "").strip():
            return error_response(
                "No Changes Detected\n"
                f"{RULE}\n\n"
                "Repository has no changes to commit.\n\n"
                "Important: Do NOT call end_session() - no commit was created.\n\n"
                "NEXT STEP: Make some changes first, then call checkpoint() again."
            )

        added = await self.executor.execute(["add", "-A"], repo, internal)
        if not added.ok:
            return self._checkpoint_failure("Failed to Stage Changes", added.render())

        author = parsed.author or limits.default_author
        message = parsed.title
        if parsed.message:
            message += f"\n\n{parsed.message}"
        message += f"\n\nAuthor: {author} (via ShadowGit MCP)"

        commit_env = {
            "GIT_AUTHOR_NAME": author,
            "GIT_AUTHOR_EMAIL": author_email(author),
            "GIT_COMMITTER_NAME": limits.committer_name,
            "GIT_COMMITTER_EMAIL": limits.committer_email,
        }
        committed = await self.executor.execute(["commit", "-m", message], repo, internal, commit_env)
        if not committed.ok:
            return self._checkpoint_failure("Failed to Create Commit", committed.render())

        commit_output = committed.render()
        commit_hash = extract_commit_hash(commit_output) or "unknown"
        summary = await self.executor.execute(["show", "--stat", "--format=short", "HEAD"], repo, internal)
        logger.info("Checkpoint %s created in %s", commit_hash, repo.path)

        return text_response(
            "Checkpoint Created Successfully!\n"
            f"{RULE}\n\n"
            f"Commit Details:\n{commit_output}\n\n"
            f"Changes Summary:\n{summary.render()}\n\n"
            f"Commit Hash: {commit_hash}\n\n"
            f"{RULE}\n\n"
            "REQUIRED NEXT STEP:\n"
            "You MUST now call end_session() to resume auto-commits:\n\n"
            f'  end_session({{sessionId: "your-session-id", commitHash: "{commit_hash}"}})'
        )

    def _checkpoint_failure(self, title: str, detail: str) -> ToolResponse:
        return error_response(
            f"{title}\n"
            f"{RULE}\n\n"
            f"Details: {detail}\n\n"
            "Important: Do NOT call end_session() - commit was not created.\n\n"
            "NEXT STEP: Check the error and try checkpoint() again."
        )

    async def start_session(self, args: Any) -> ToolResponse:
        parsed = _parse(StartSessionArgs, args)
        if parsed is None:
            return error_response('Error: Both "repo" and "description" are required for start_session.')

        repo = self.resolver.resolve(parsed.repo)
        if repo is None:
            return error_response(
                f"Error: Repository '{parsed.repo}' not found. "
                "Use list_repos() to see available repositories."
            )

        session_id = await self.session_client.start_session(
            repo_path=str(repo.path),
            ai_tool="MCP Client",
            description=parsed.description,
        )
        if session_id is None:
            return error_response("Session API is offline. Proceeding without session tracking.")

        return text_response(
            "Session started successfully.\n"
            f"Session ID: {session_id}\n\n"
            "Your Workflow Checklist:\n"
            "1. Make your changes\n"
            "2. Call checkpoint() to commit\n"
            "3. Call end_session() with this session ID"
        )

    async def end_session(self, args: Any) -> ToolResponse:
        parsed = _parse(EndSessionArgs, args)
        if parsed is None:
            return error_response('Error: "sessionId" is required for end_session.')

        if await self.session_client.end_session(parsed.sessionId, parsed.commitHash):
            return text_response(f"Session {parsed.sessionId} ended successfully.")

        return error_response(
            "Failed to End Session\n"
            f"{RULE}\n\n"
            "The session may have already ended or expired.\n\n"
            "Note: Auto-commits may have already resumed.\n\n"
            "NEXT STEP: You can continue working or start a new session."
        )
