"""Configuration loading for github-mcp-server.

Configuration is supplied by the host environment (the MCP client config) and by CLI
flags, never by the agent. The token is a secret and must never be emitted to agents,
logs or audit events.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable
from urllib.parse import urlsplit

from .errors import CONFIG, SafeError
from .toolsets import DEFAULT_TOOLSETS

DOTCOM_API_URL = "https://api.github.com"
DOTCOM_GRAPHQL_URL = "https://api.github.com/graphql"


@dataclass(frozen=True, slots=True)
class LimitsConfig:
    """Non-functional safety limits."""

    # Network
    total_timeout_s: float = 60.0
    connect_timeout_s: float = 5.0
    read_timeout_s: float = 30.0

    # Retries
    max_attempts: int = 3
    max_backoff_s: float = 5.0


@dataclass(frozen=True, slots=True)
class ApiHost:
    """REST and GraphQL endpoints for the configured GitHub deployment."""

    rest_url: str
    kind: str  # "dotcom", "ghec" or "ghes"
    graphql_url: str


@dataclass(frozen=True, slots=True)
class ServerConfig:
    """Startup configuration; fixed for the lifetime of the process."""

    token: str = field(repr=False)
    api_host: ApiHost
    read_only: bool = False
    toolsets: tuple[str, ...] = DEFAULT_TOOLSETS
    log_file: Path | None = None
    enable_command_logging: bool = False
    export_translations: bool = False
    audit_log_path: Path | None = None
    audit_max_bytes: int = 5 * 1024 * 1024
    audit_max_backups: int = 2
    limits: LimitsConfig = field(default_factory=LimitsConfig)


def _parse_bool(value: str | None) -> bool:
    if value is None:
        return False
    normalized = value.strip().lower()
    return normalized in {"1", "true", "yes", "on"}


def _parse_names(value: str | None) -> tuple[str, ...]:
    if not value:
        return ()
    parts = [p.strip() for p in value.split(",")]
    return tuple(p for p in parts if p)


def parse_api_host(host: str) -> ApiHost:
    """Map a GitHub host to its REST and GraphQL API URLs.

    - "" or any *github.com host: https://api.github.com (GraphQL at /graphql)
    - *ghe.com (GitHub Enterprise Cloud): https://api.<host>, https only (GraphQL at /graphql)
    - anything else (GitHub Enterprise Server): <scheme>://<host>/api/v3 (GraphQL at /api/graphql)

    Ports are not supported.
    """
    if host == "":
        return ApiHost(rest_url=DOTCOM_API_URL, kind="dotcom", graphql_url=DOTCOM_GRAPHQL_URL)

    parts = urlsplit(host)
    if not parts.scheme:
        raise SafeError(code=CONFIG, message=f"host must have a scheme (http or https): {host}")
    hostname = parts.hostname or ""

    if hostname.endswith("github.com"):
        return ApiHost(rest_url=DOTCOM_API_URL, kind="dotcom", graphql_url=DOTCOM_GRAPHQL_URL)

    if hostname.endswith("ghe.com"):
        if parts.scheme == "http":
            raise SafeError(code=CONFIG, message="GHEC URL must be HTTPS")
        return ApiHost(rest_url=f"https://api.{hostname}", kind="ghec", graphql_url=f"https://api.{hostname}/graphql")

    return ApiHost(
        rest_url=f"{parts.scheme}://{hostname}/api/v3",
        kind="ghes",
        graphql_url=f"{parts.scheme}://{hostname}/api/graphql",
    )


def _optional_absolute_path(env_name: str) -> Path | None:
    raw = os.getenv(env_name)
    if not raw:
        return None
    p = Path(raw)
    if not p.is_absolute():
        raise SafeError(code=CONFIG, message=f"{env_name} must be an absolute path when set")
    return p


def load_config_from_env(
    *,
    read_only: bool | None = None,
    toolsets: Iterable[str] | None = None,
    host: str | None = None,
    log_file: str | None = None,
    enable_command_logging: bool | None = None,
    export_translations: bool | None = None,
) -> ServerConfig:
    """Load and validate configuration from environment variables.

    Keyword arguments are CLI overrides; None means "use the environment".

    Raises:
        SafeError: If configuration is missing/invalid.
    """
    token = os.getenv("GITHUB_PERSONAL_ACCESS_TOKEN", "")
    if not token:
        raise SafeError(code=CONFIG, message="GITHUB_PERSONAL_ACCESS_TOKEN not set")

    if host is None:
        host = os.getenv("GITHUB_HOST", "")
    api_host = parse_api_host(host.strip())

    if read_only is None:
        read_only = _parse_bool(os.getenv("GITHUB_READ_ONLY"))
    if enable_command_logging is None:
        enable_command_logging = _parse_bool(os.getenv("GITHUB_ENABLE_COMMAND_LOGGING"))
    if export_translations is None:
        export_translations = _parse_bool(os.getenv("GITHUB_EXPORT_TRANSLATIONS"))

    if toolsets is None:
        names = _parse_names(os.getenv("GITHUB_TOOLSETS"))
    else:
        names = tuple(n.strip() for n in toolsets if n.strip())

    if log_file is None:
        log_file = os.getenv("GITHUB_LOG_FILE") or None

    return ServerConfig(
        token=token,
        api_host=api_host,
        read_only=read_only,
        toolsets=names or DEFAULT_TOOLSETS,
        log_file=Path(log_file) if log_file else None,
        enable_command_logging=enable_command_logging,
        export_translations=export_translations,
        audit_log_path=_optional_absolute_path("GITHUB_MCP_AUDIT_LOG_PATH"),
        limits=LimitsConfig(),
    )
