"""Secure command-execution gateway for ShadowGit repositories.

Components:
- Quote-aware command tokenizer (tokenizer.py)
- Argument blacklist and subcommand whitelist (security.py)
- Repository name/path resolution (resolver.py)
- Locked-down git process invocation (invoker.py)
- Failure classification and rendering (errors.py)
- The facade tying them together (executor.py)
"""

from .executor import GitExecutor
from .resolver import RepositoryResolver

__all__ = ["GitExecutor", "RepositoryResolver"]
