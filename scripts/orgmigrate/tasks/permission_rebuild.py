"""Recreate team memberships and collaborator permissions in the destination org."""

from __future__ import annotations

import logging

from scripts.orgmigrate.base_task import BaseTask
from scripts.orgmigrate.config import MigrationConfig
from scripts.orgmigrate.csv_io import read_repo_access_mapping, read_team_mapping
from scripts.orgmigrate.errors import NotFound
from scripts.orgmigrate.providers.github_org import GitHubOrgProvider, permission_for_rest

logger = logging.getLogger("orgmigrate.permission_rebuild")


class TeamMembershipApplyTask(BaseTask):
    """Add mapped users to destination teams.

    Teams linked to an external IdP group get their membership from the
    IdP and are skipped.
    """

    TASK_NAME = "apply-teams"

    def __init__(
        self,
        config: MigrationConfig,
        dest: GitHubOrgProvider,
        mapping_path: str,
        dry_run: bool = False,
    ) -> None:
        super().__init__(config)
        self.dest = dest
        self.mapping_path = mapping_path
        self.dry_run = dry_run
        self._idp_synced: dict[str, bool] = {}

    def _is_idp_synced(self, slug: str) -> bool:
        if slug not in self._idp_synced:
            self._idp_synced[slug] = bool(self.dest.team_external_groups(slug))
        return self._idp_synced[slug]

    def run(self) -> dict[str, int]:
        counts = {"applied": 0, "skipped": 0, "missing": 0}
        for record in read_team_mapping(self.mapping_path):
            if not record.slug or not record.dest_login:
                counts["skipped"] += 1
                continue
            try:
                if self._is_idp_synced(record.slug):
                    logger.warning(
                        "Team %s is synced with an external group, skipping %s",
                        record.slug, record.dest_login,
                        extra={"login": record.dest_login},
                    )
                    counts["skipped"] += 1
                    continue
                role = "maintainer" if record.role.upper() == "MAINTAINER" else "member"
                if self.dry_run:
                    logger.info("Would add %s to %s as %s", record.dest_login, record.slug, role)
                else:
                    self.dest.set_team_membership(record.slug, record.dest_login, role)
                counts["applied"] += 1
            except NotFound as exc:
                logger.warning(
                    "Team %s or user %s not found in %s: %s",
                    record.slug, record.dest_login, self.dest.org, exc,
                    extra={"org": self.dest.org, "login": record.dest_login},
                )
                counts["missing"] += 1
        return counts


class RepoAccessApplyTask(BaseTask):
    """Grant mapped users their direct repository permission."""

    TASK_NAME = "apply-repo-access"

    def __init__(
        self,
        config: MigrationConfig,
        dest: GitHubOrgProvider,
        mapping_path: str,
        dry_run: bool = False,
    ) -> None:
        super().__init__(config)
        self.dest = dest
        self.mapping_path = mapping_path
        self.dry_run = dry_run

    def run(self) -> dict[str, int]:
        counts = {"applied": 0, "skipped": 0, "missing": 0}
        for record in read_repo_access_mapping(self.mapping_path):
            if not record.repo or not record.login:
                counts["skipped"] += 1
                continue
            # PUT also upgrades users who already have base or team access
            permission = permission_for_rest(record.permission)
            if self.dry_run:
                logger.info("Would grant %s %s on %s", record.login, permission, record.repo)
                counts["applied"] += 1
                continue
            try:
                self.dest.add_collaborator(record.repo, record.login, permission)
            except NotFound as exc:
                logger.warning(
                    "Repository %s or user %s not found in %s: %s",
                    record.repo, record.login, self.dest.org, exc,
                    extra={"org": self.dest.org, "repo": record.repo, "login": record.login},
                )
                counts["missing"] += 1
                continue
            counts["applied"] += 1
        return counts
