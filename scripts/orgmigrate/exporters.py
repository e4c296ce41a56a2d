"""Project resolved identity mappings onto team, repository and mannequin records."""

from __future__ import annotations

import dataclasses
import logging
from typing import Iterable, Optional, Sequence

from scripts.orgmigrate.models import (
    Mannequin,
    RepositoryAccessRecord,
    ResolvedMapping,
    TeamMembershipRecord,
    normalize,
)

logger = logging.getLogger("orgmigrate.exporters")

BOT_MARKER = "[bot]"


class MappingIndex:
    """Source login -> first resolved mapping for that login."""

    def __init__(self, mappings: Iterable[ResolvedMapping]) -> None:
        self._by_source: dict[str, ResolvedMapping] = {}
        for mapping in mappings:
            key = normalize(mapping.source_name)
            if key is not None:
                self._by_source.setdefault(key, mapping)

    def __len__(self) -> int:
        return len(self._by_source)

    def lookup(self, login: Optional[str]) -> Optional[ResolvedMapping]:
        key = normalize(login)
        if key is None:
            return None
        return self._by_source.get(key)


def merge_overrides(
    resolved: Sequence[ResolvedMapping],
    overrides: Sequence[tuple[str, str]],
) -> list[ResolvedMapping]:
    """Apply explicit source -> destination pairs on top of resolved mappings.

    An override replaces the resolved pair for the same source login and
    keeps its position; overrides for unresolved logins are appended.
    """
    pending = {normalize(src): normalize(dst) for src, dst in overrides}
    merged: list[ResolvedMapping] = []
    for mapping in resolved:
        dest = pending.pop(normalize(mapping.source_name), None)
        if dest is None:
            merged.append(mapping)
            continue
        same_dest = dest == normalize(mapping.dest_name)
        if not same_dest:
            logger.info(
                "Override maps %s to %s instead of %s",
                mapping.source_name, dest, mapping.dest_name,
                extra={"login": mapping.source_name},
            )
        merged.append(ResolvedMapping(
            source_name=mapping.source_name,
            dest_name=dest,
            source_identity=mapping.source_identity,
            dest_identity=mapping.dest_identity if same_dest else None,
            origin="override",
        ))
    for source, dest in pending.items():
        merged.append(ResolvedMapping(source_name=source, dest_name=dest, origin="override"))
    return merged


def export_mannequins(
    mappings: Iterable[ResolvedMapping],
    mannequins: Iterable[Mannequin],
) -> list[tuple[Mannequin, str]]:
    """Pair each unclaimed, non-bot mannequin with its destination login."""
    index = MappingIndex(mappings)
    out: list[tuple[Mannequin, str]] = []
    for mannequin in mannequins:
        if BOT_MARKER in mannequin.login.lower():
            logger.debug("Skipping bot mannequin %s", mannequin.login)
            continue
        if mannequin.claimant:
            logger.debug(
                "Mannequin %s already claimed by %s", mannequin.login, mannequin.claimant
            )
            continue
        mapping = index.lookup(mannequin.login)
        if mapping is None:
            logger.warning(
                "No mapping for mannequin %s", mannequin.login,
                extra={"login": mannequin.login},
            )
            continue
        out.append((mannequin, mapping.dest_name))
    return out


def export_team_memberships(
    mappings: Iterable[ResolvedMapping],
    memberships: Iterable[TeamMembershipRecord],
) -> list[TeamMembershipRecord]:
    """Substitute destination logins into source team memberships."""
    index = MappingIndex(mappings)
    out: list[TeamMembershipRecord] = []
    for record in memberships:
        mapping = index.lookup(record.source_login)
        if mapping is None:
            logger.warning(
                "No mapping for %s in team %s", record.source_login, record.slug,
                extra={"login": record.source_login},
            )
            continue
        out.append(dataclasses.replace(record, dest_login=mapping.dest_name))
    return out


def export_repository_access(
    mappings: Iterable[ResolvedMapping],
    collaborators: Iterable[RepositoryAccessRecord],
) -> list[RepositoryAccessRecord]:
    """Substitute destination logins into direct collaborator records."""
    index = MappingIndex(mappings)
    out: list[RepositoryAccessRecord] = []
    for record in collaborators:
        mapping = index.lookup(record.source_login)
        if mapping is None:
            logger.warning(
                "No mapping for collaborator %s on %s", record.source_login, record.repo,
                extra={"login": record.source_login, "repo": record.repo},
            )
            continue
        out.append(dataclasses.replace(record, login=mapping.dest_name))
    return out


def mannequin_rows(pairs: Iterable[tuple[Mannequin, str]]) -> list[dict[str, object]]:
    return [
        {"mannequin-user": m.login, "mannequin-id": m.id, "target-user": dest}
        for m, dest in pairs
    ]


def team_rows(records: Iterable[TeamMembershipRecord]) -> list[dict[str, object]]:
    return [
        {
            "Team": r.team,
            "Slug": r.slug,
            "Role": r.role,
            "Source": r.source_login,
            "Destination": r.dest_login,
        }
        for r in records
    ]


def repo_access_rows(records: Iterable[RepositoryAccessRecord]) -> list[dict[str, object]]:
    return [
        {
            "Repository": r.repo,
            "Permission": r.permission,
            "Source": r.source_login,
            "Destination": r.login,
        }
        for r in records
    ]
