"""Git operations on the fork checkout.

Usage:
    from forkrel.git import Repository

    repo = Repository(Path("/path/to/fork"))
    tags = repo.list_tags("v*")
"""

from forkrel.git.repository import GitError, Repository, StatusEntry

__all__ = ["GitError", "Repository", "StatusEntry"]
