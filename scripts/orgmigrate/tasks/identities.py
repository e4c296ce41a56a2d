"""Identity resolution task: source SAML identities -> destination members."""

from __future__ import annotations

import logging
from typing import Iterable, Optional

from scripts.orgmigrate.base_task import BaseTask
from scripts.orgmigrate.config import MigrationConfig
from scripts.orgmigrate.csv_io import IDENTITY_COLUMNS, load_overrides, write_csv
from scripts.orgmigrate.exporters import merge_overrides
from scripts.orgmigrate.identity_resolver import IdentityResolver
from scripts.orgmigrate.models import ResolutionResult, ResolvedMapping
from scripts.orgmigrate.providers.github_org import GitHubOrgProvider

logger = logging.getLogger("orgmigrate.identities")


def resolve_identities(
    source: GitHubOrgProvider,
    dest: GitHubOrgProvider,
    override_path: Optional[str] = None,
) -> tuple[ResolutionResult, list[ResolvedMapping]]:
    """Resolve identities and apply overrides. Returns (result, final mappings)."""
    result = IdentityResolver().resolve(
        source.list_external_identities(),
        dest.list_members(),
    )
    _log_unresolved(result)

    mappings = list(result.resolved)
    if override_path:
        mappings = merge_overrides(mappings, load_overrides(override_path))
    return result, mappings


def _log_unresolved(result: ResolutionResult) -> None:
    for identity in result.unresolved_source:
        logger.warning(
            "No destination member for source identity %s (username=%s, nameId=%s)",
            identity.login, identity.username, identity.name_id,
            extra={"login": identity.login},
        )
    for identity in result.removed_source:
        logger.warning(
            "Source identity %s is not linked to a user account",
            identity.username or identity.name_id,
        )
    for member in result.unresolved_dest:
        logger.warning(
            "Destination member %s (%s) matched no source identity",
            member.login, member.resolved_email,
            extra={"login": member.login},
        )


def identity_rows(
    result: ResolutionResult,
    mappings: Iterable[ResolvedMapping],
) -> list[dict[str, object]]:
    rows: list[dict[str, object]] = []
    for m in mappings:
        ident = m.source_identity
        rows.append({
            "status": "resolved" if m.origin == "auto" else m.origin,
            "source": m.source_name,
            "destination": m.dest_name,
            "username": ident.username if ident else "",
            "name-id": ident.name_id if ident else "",
            "email": m.dest_identity.resolved_email if m.dest_identity else "",
        })
    for ident in result.unresolved_source:
        rows.append({
            "status": "unresolved-source",
            "source": ident.login,
            "destination": "",
            "username": ident.username,
            "name-id": ident.name_id,
            "email": ident.primary_email,
        })
    for ident in result.removed_source:
        rows.append({
            "status": "removed-source",
            "source": "",
            "destination": "",
            "username": ident.username,
            "name-id": ident.name_id,
            "email": ident.primary_email,
        })
    for member in result.unresolved_dest:
        rows.append({
            "status": "unresolved-destination",
            "source": "",
            "destination": member.login,
            "username": "",
            "name-id": "",
            "email": member.resolved_email,
        })
    return rows


class IdentityReportTask(BaseTask):
    TASK_NAME = "identities"

    def __init__(
        self,
        config: MigrationConfig,
        source: GitHubOrgProvider,
        dest: GitHubOrgProvider,
        output: str,
        override_path: Optional[str] = None,
    ) -> None:
        super().__init__(config)
        self.source = source
        self.dest = dest
        self.output = output
        self.override_path = override_path

    def run(self) -> dict[str, int]:
        result, mappings = resolve_identities(self.source, self.dest, self.override_path)
        write_csv(self.output, IDENTITY_COLUMNS, identity_rows(result, mappings))
        counts = result.counts()
        counts["overrides"] = sum(1 for m in mappings if m.origin == "override")
        return counts
