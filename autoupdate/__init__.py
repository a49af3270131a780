"""Keep open pull requests up to date with their base branch."""

__version__ = "1.0.0"
