"""Analysis configuration."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from .errors import ConfigError

DEFAULT_EXTENSIONS = (
    ".js", ".cjs", ".mjs", ".ts", ".jsx", ".tsx", ".css",
    ".scss", ".sass", ".html", ".sh", ".vue",
    ".svelte", ".rs",
)

DEFAULT_IGNORED_PATHS = (
    "dist", "node_modules/", "build/",
    ".husky", "lintrc", "public/",
)

MAX_PAGE_SIZE = 100


def _normalize_extension(ext: str) -> str:
    ext = ext.strip()
    if ext and not ext.startswith("."):
        return f".{ext}"
    return ext


@dataclass(frozen=True)
class AnalysisConfig:
    """Read-only settings for one analysis run."""

    api_url: str
    token: str
    group_id: str
    start_date: str
    end_date: str
    page_size: int = MAX_PAGE_SIZE
    excluded_projects: frozenset[str] = field(default_factory=frozenset)
    allowed_extensions: frozenset[str] = field(
        default_factory=lambda: frozenset(DEFAULT_EXTENSIONS)
    )
    max_concurrency: int = 20
    ignored_paths: tuple[str, ...] = DEFAULT_IGNORED_PATHS
    project_limit: int | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "api_url", self.api_url.rstrip("/"))
        object.__setattr__(self, "excluded_projects", frozenset(self.excluded_projects))
        object.__setattr__(
            self,
            "allowed_extensions",
            frozenset(_normalize_extension(e) for e in self.allowed_extensions if e.strip()),
        )
        object.__setattr__(self, "ignored_paths", tuple(p for p in self.ignored_paths if p))

    def validate(self) -> None:
        if not self.api_url:
            raise ConfigError("GitLab API URL is required")
        if not self.token:
            raise ConfigError("GitLab token is required")
        if not str(self.group_id).strip():
            raise ConfigError("Group ID is required")
        if not 1 <= self.page_size <= MAX_PAGE_SIZE:
            raise ConfigError(f"Page size must be between 1 and {MAX_PAGE_SIZE}")
        if self.max_concurrency < 1:
            raise ConfigError("Concurrency must be at least 1")
        if self.project_limit is not None and self.project_limit < 1:
            raise ConfigError("Project limit must be at least 1")

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> AnalysisConfig:
        """Build a config from the plain key names used by the web front-end."""
        try:
            return cls(
                api_url=data["gitlab_api"],
                token=data["gitlab_token"],
                group_id=str(data["group_id"]),
                start_date=data["start_date"],
                end_date=data["end_date"],
                page_size=int(data.get("projects_num", MAX_PAGE_SIZE)),
                excluded_projects=frozenset(data.get("excluded_projects") or ()),
                allowed_extensions=frozenset(data.get("valid_extensions", DEFAULT_EXTENSIONS)),
                max_concurrency=int(data.get("max_concurrent_requests", 20)),
                ignored_paths=tuple(data.get("ignored_paths", DEFAULT_IGNORED_PATHS)),
                project_limit=data.get("project_limit"),
            )
        except KeyError as e:
            raise ConfigError(f"Missing configuration key: {e.args[0]}") from e
        except (TypeError, ValueError) as e:
            raise ConfigError(f"Invalid configuration: {e}") from e
