"""Configuration via environment variables with cloud-native secret support.

Supports:
  - Environment variables (local dev, .env files)
  - AWS Secrets Manager token references (aws-secret://name#key)
  - GCP Secret Manager token references (gcp-secret://name)
  - Command-line overrides for org names, tokens and debug capture
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

from scripts.orgmigrate.secrets import resolve_token

DEFAULT_API_URL = "https://api.github.com"


@dataclass(frozen=True)
class OrgConfig:
    org: str
    token: str
    api_base_url: str = DEFAULT_API_URL
    graphql_url: str = DEFAULT_API_URL + "/graphql"


@dataclass(frozen=True)
class MigrationConfig:
    source: Optional[OrgConfig] = None
    dest: Optional[OrgConfig] = None
    rest_max_pages: int = 100
    graph_max_pages: int = 500
    mutation_interval_s: float = 1.0
    http_timeout_s: float = 60.0
    debug_capture_dir: Optional[str] = None
    log_level: str = "INFO"

    def require(self, side: str) -> OrgConfig:
        """Return the org config for 'source' or 'dest', failing if unset."""
        org = getattr(self, side)
        if org is None:
            prefix = "SOURCE" if side == "source" else "DEST"
            raise ValueError(
                f"{side} organisation not configured: set {prefix}_ORG "
                f"or pass --{side}-org"
            )
        return org


def _load_org(
    side: str,
    org: Optional[str],
    token: Optional[str],
) -> Optional[OrgConfig]:
    prefix = side.upper()
    org = org or os.environ.get(f"{prefix}_ORG", "")
    if not org:
        return None

    token = resolve_token(prefix, token)
    if not token:
        raise ValueError(
            f"No token for {side} organisation {org}: set {prefix}_GITHUB_TOKEN "
            f"or GITHUB_TOKEN, or pass --{side}-token"
        )

    api_url = os.environ.get(f"{prefix}_GITHUB_API_URL", DEFAULT_API_URL).rstrip("/")
    graphql_url = os.environ.get(f"{prefix}_GITHUB_GRAPHQL_URL", f"{api_url}/graphql")
    return OrgConfig(
        org=org,
        token=token,
        api_base_url=api_url,
        graphql_url=graphql_url,
    )


def load_config(
    source_org: Optional[str] = None,
    dest_org: Optional[str] = None,
    source_token: Optional[str] = None,
    dest_token: Optional[str] = None,
    debug_capture_dir: Optional[str] = None,
    log_level: Optional[str] = None,
) -> MigrationConfig:
    """Load configuration from environment variables.

    Explicit arguments (from the CLI) win over the environment. An org side
    without a name is left unconfigured; commands that need it call
    MigrationConfig.require().
    """
    load_dotenv()

    return MigrationConfig(
        source=_load_org("source", source_org, source_token),
        dest=_load_org("dest", dest_org, dest_token),
        rest_max_pages=int(os.environ.get("REST_MAX_PAGES", "100")),
        graph_max_pages=int(os.environ.get("GRAPH_MAX_PAGES", "500")),
        mutation_interval_s=float(os.environ.get("MUTATION_INTERVAL_SECONDS", "1.0")),
        http_timeout_s=float(os.environ.get("HTTP_TIMEOUT_SECONDS", "60")),
        debug_capture_dir=debug_capture_dir or os.environ.get("DEBUG_CAPTURE_DIR") or None,
        log_level=log_level or os.environ.get("LOG_LEVEL", "INFO"),
    )
