"""wireup: plan and commit third-party service integrations into a repository."""

__version__ = "0.1.0"
