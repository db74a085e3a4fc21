"""Next-release resolution for downstream forks that tag their own prereleases."""

__version__ = "0.3.0"
