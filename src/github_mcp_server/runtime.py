"""Per-process runtime shared by every tool call and resource read."""

from __future__ import annotations

from dataclasses import dataclass

from .audit import AuditLogger
from .config import ServerConfig
from .github_client import GitHubClient, RequestBudget, static_token_provider
from .github_graphql_client import GitHubGraphQLClient
from .translations import TranslateFunc, Translator


@dataclass(frozen=True, slots=True)
class Runtime:
    """Per-server runtime dependencies shared across tool calls."""

    config: ServerConfig
    audit: AuditLogger
    github: GitHubClient
    graphql: GitHubGraphQLClient
    translate: TranslateFunc

    def budget(self) -> RequestBudget:
        return RequestBudget(total_timeout_s=self.config.limits.total_timeout_s)


def build_runtime(config: ServerConfig, *, translate: TranslateFunc | None = None) -> Runtime:
    """Wire the REST and GraphQL clients, command log and translator for `config`."""
    audit = AuditLogger(
        sink_path=config.audit_log_path,
        enabled=config.enable_command_logging,
        max_bytes=config.audit_max_bytes,
        max_backups=config.audit_max_backups,
    )
    token_provider = static_token_provider(config.token)
    github = GitHubClient(
        token_provider=token_provider,
        limits=config.limits,
        api_base_url=config.api_host.rest_url,
    )
    graphql = GitHubGraphQLClient(
        token_provider=token_provider,
        limits=config.limits,
        graphql_url=config.api_host.graphql_url,
    )
    return Runtime(
        config=config,
        audit=audit,
        github=github,
        graphql=graphql,
        translate=translate if translate is not None else Translator(),
    )
