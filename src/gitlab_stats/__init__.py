"""Per-author contribution statistics across the projects of a GitLab group."""

__version__ = "0.1.0"
