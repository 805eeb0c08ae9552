"""issuecast: real-time issue tracker with git-versioned JSON storage."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("issuecast")
except PackageNotFoundError:
    __version__ = "0.0.0-dev"

from issuecast.models import Comment, Issue

__all__ = ["Comment", "Issue", "__version__"]
