"""CSV files: override input, mapping outputs, audit reports."""

from __future__ import annotations

import csv
import logging
from typing import Iterable, Mapping

from scripts.orgmigrate.models import (
    RepositoryAccessRecord,
    TeamMembershipRecord,
    normalize,
)

logger = logging.getLogger("orgmigrate.csv_io")

OVERRIDE_COLUMNS = ["source", "dest"]
MANNEQUIN_COLUMNS = ["mannequin-user", "mannequin-id", "target-user"]
TEAM_COLUMNS = ["Team", "Slug", "Role", "Source", "Destination"]
REPO_ACCESS_COLUMNS = ["Repository", "Permission", "Source", "Destination"]
IDENTITY_COLUMNS = ["status", "source", "destination", "username", "name-id", "email"]
SECRET_COLUMNS = ["Scope", "Kind", "Repository", "Environment", "Name", "Present In Destination"]
VISIBILITY_COLUMNS = ["Repository", "Source Visibility", "Destination Visibility", "Action"]


def write_csv(path: str, columns: list[str], rows: Iterable[Mapping[str, object]]) -> int:
    """Write rows with a fixed header. Returns the number of data rows."""
    count = 0
    with open(path, "w", newline="", encoding="utf-8") as fh:
        writer = csv.DictWriter(fh, fieldnames=columns)
        writer.writeheader()
        for row in rows:
            writer.writerow(row)
            count += 1
    logger.info("Wrote %d rows to %s", count, path, extra={"records": count})
    return count


def _read_rows(path: str) -> list[dict[str, str]]:
    with open(path, newline="", encoding="utf-8-sig") as fh:
        reader = csv.DictReader(fh)
        return [
            {(k or "").strip(): (v or "").strip() for k, v in row.items()}
            for row in reader
        ]


def load_overrides(path: str) -> list[tuple[str, str]]:
    """Read explicit source -> destination login pairs.

    Rows missing either login, and rows repeating an earlier source login,
    are discarded with a warning.
    """
    pairs: list[tuple[str, str]] = []
    seen: set[str] = set()
    for line, row in enumerate(_read_rows(path), start=2):
        source = normalize(row.get("source"))
        dest = normalize(row.get("dest"))
        if not source or not dest:
            logger.warning("Override %s:%d is incomplete, ignoring", path, line)
            continue
        if source in seen:
            logger.warning(
                "Override %s:%d repeats source %s, ignoring", path, line, source,
                extra={"login": source},
            )
            continue
        seen.add(source)
        pairs.append((source, dest))
    logger.info("Loaded %d override mappings from %s", len(pairs), path)
    return pairs


def read_team_mapping(path: str) -> list[TeamMembershipRecord]:
    return [
        TeamMembershipRecord(
            team=row.get("Team", ""),
            slug=row.get("Slug", ""),
            parent_team=None,
            role=row.get("Role", ""),
            source_login=row.get("Source", ""),
            dest_login=row.get("Destination", ""),
        )
        for row in _read_rows(path)
    ]


def read_repo_access_mapping(path: str) -> list[RepositoryAccessRecord]:
    return [
        RepositoryAccessRecord(
            repo=row.get("Repository", ""),
            permission=row.get("Permission", ""),
            source_login=row.get("Source", ""),
            login=row.get("Destination", ""),
        )
        for row in _read_rows(path)
    ]
