"""Reconcile destination repository visibility with the source org."""

from __future__ import annotations

import logging
from typing import Optional

from scripts.orgmigrate.base_task import BaseTask
from scripts.orgmigrate.config import MigrationConfig
from scripts.orgmigrate.csv_io import VISIBILITY_COLUMNS, write_csv
from scripts.orgmigrate.errors import NotFound
from scripts.orgmigrate.providers.github_org import GitHubOrgProvider

logger = logging.getLogger("orgmigrate.visibility")


def _visibility(repo: dict) -> str:
    if repo.get("visibility"):
        return repo["visibility"]
    return "private" if repo.get("private") else "public"


class VisibilityTask(BaseTask):
    TASK_NAME = "visibility"

    def __init__(
        self,
        config: MigrationConfig,
        source: GitHubOrgProvider,
        dest: GitHubOrgProvider,
        output: Optional[str] = None,
        dry_run: bool = False,
    ) -> None:
        super().__init__(config)
        self.source = source
        self.dest = dest
        self.output = output
        self.dry_run = dry_run

    def run(self) -> dict[str, int]:
        counts = {"unchanged": 0, "updated": 0, "missing": 0}
        rows = []
        for repo in self.source.list_repositories():
            name = repo["name"]
            wanted = _visibility(repo)
            try:
                current = _visibility(self.dest.get_repository(name))
            except NotFound:
                logger.warning(
                    "Repository %s not found in %s, skipping", name, self.dest.org,
                    extra={"org": self.dest.org, "repo": name},
                )
                counts["missing"] += 1
                rows.append(self._row(name, wanted, "", "missing"))
                continue

            if current == wanted:
                counts["unchanged"] += 1
                rows.append(self._row(name, wanted, current, "unchanged"))
                continue

            if self.dry_run:
                logger.info("Would change %s from %s to %s", name, current, wanted,
                            extra={"repo": name})
                action = "would-update"
            else:
                self.dest.set_visibility(name, wanted)
                logger.info("Changed %s from %s to %s", name, current, wanted,
                            extra={"repo": name})
                action = "updated"
            counts["updated"] += 1
            rows.append(self._row(name, wanted, current, action))

        if self.output:
            write_csv(self.output, VISIBILITY_COLUMNS, rows)
        return counts

    @staticmethod
    def _row(name: str, source: str, dest: str, action: str) -> dict[str, object]:
        return {
            "Repository": name,
            "Source Visibility": source,
            "Destination Visibility": dest,
            "Action": action,
        }
