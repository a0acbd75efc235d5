from .client import GitLabClient
from .fetcher import RequestContext, ResilientFetcher, redact_url

__all__ = ["GitLabClient", "RequestContext", "ResilientFetcher", "redact_url"]
