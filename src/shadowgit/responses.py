"""Text responses returned by the MCP tools."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from .types import Repository

RULE = "=" * 50


@dataclass(frozen=True)
class ToolResponse:
    text: str
    success: bool = True


def text_response(text: str) -> ToolResponse:
    return ToolResponse(text=text)


def error_response(error: str, details: str | None = None) -> ToolResponse:
    message = f"{error}\n\n{details}" if details else error
    return ToolResponse(text=message, success=False)


def format_repository_list(repos: Iterable[Repository]) -> str:
    lines = [f"  {r.name}:\n    Path: {r.path}" for r in repos]
    if not lines:
        return "No repositories available."
    return "\n\n".join(lines)


def repo_not_found_response(repo_name: str, available: tuple[Repository, ...]) -> ToolResponse:
    message = f"Error: Repository '{repo_name}' not found."
    if available:
        message += f"\n\nAvailable repositories:\n{format_repository_list(available)}"
    else:
        message += "\n\nNo repositories found. Please add repositories to ShadowGit first."
    return error_response(message)


def workflow_hint(repo_name: str) -> str:
    return (
        f"{RULE}\n"
        "Planning to Make Changes?\n"
        f"{RULE}\n\n"
        "Required Workflow:\n"
        f'1. start_session({{repo: "{repo_name}", description: "your task"}})\n'
        "2. Make your changes\n"
        f'3. checkpoint({{repo: "{repo_name}", title: "commit message"}})\n'
        '4. end_session({sessionId: "...", commitHash: "..."})\n\n'
        "NEXT STEP: Call start_session() before editing any files!"
    )


def repository_overview(repos: tuple[Repository, ...]) -> str:
    first = repos[0].name
    return (
        "ShadowGit MCP Server Connected\n"
        f"{RULE}\n\n"
        f"Available Repositories ({len(repos)})\n"
        f"{format_repository_list(repos)}\n\n"
        f"{RULE}\n"
        "Required Workflow for ALL Changes\n"
        f"{RULE}\n\n"
        "1. START SESSION (before ANY edits)\n"
        f'   start_session({{repo: "{first}", description: "your task"}})\n\n'
        "2. MAKE YOUR CHANGES\n\n"
        "3. CREATE CHECKPOINT (after changes complete)\n"
        f'   checkpoint({{repo: "{first}", title: "Clear commit message"}})\n\n'
        "4. END SESSION (to resume auto-commits)\n"
        '   end_session({sessionId: "...", commitHash: "..."})\n\n'
        f"{RULE}\n\n"
        "Quick start:\n"
        f'  git_command({{repo: "{first}", command: "log -5"}})'
    )


NO_REPOSITORIES = (
    "No repositories found in ShadowGit.\n\n"
    "To add repositories:\n"
    "1. Open the ShadowGit application\n"
    '2. Click "Add Repository"\n'
    "3. Select the repository you want to track\n\n"
    "ShadowGit will automatically create shadow repositories (.shadowgit.git) to track changes."
)
