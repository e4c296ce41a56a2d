"""Mapping export tasks: mannequins, team memberships, repository access."""

from __future__ import annotations

import logging
from typing import Optional

from scripts.orgmigrate.base_task import BaseTask
from scripts.orgmigrate.config import MigrationConfig
from scripts.orgmigrate.csv_io import (
    MANNEQUIN_COLUMNS,
    REPO_ACCESS_COLUMNS,
    TEAM_COLUMNS,
    write_csv,
)
from scripts.orgmigrate.exporters import (
    export_mannequins,
    export_repository_access,
    export_team_memberships,
    mannequin_rows,
    repo_access_rows,
    team_rows,
)
from scripts.orgmigrate.providers.github_org import GitHubOrgProvider
from scripts.orgmigrate.tasks.identities import resolve_identities

logger = logging.getLogger("orgmigrate.mappings")


class _MappingTask(BaseTask):
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


class MannequinMappingTask(_MappingTask):
    """Map destination mannequins (placeholders for source users) to real members."""

    TASK_NAME = "mannequins"

    def run(self) -> dict[str, int]:
        _, mappings = resolve_identities(self.source, self.dest, self.override_path)
        mannequins = self.dest.list_mannequins()
        pairs = export_mannequins(mappings, mannequins)
        written = write_csv(self.output, MANNEQUIN_COLUMNS, mannequin_rows(pairs))
        return {"mannequins": len(mannequins), "mapped": written}


class TeamMappingTask(_MappingTask):
    TASK_NAME = "teams"

    def run(self) -> dict[str, int]:
        _, mappings = resolve_identities(self.source, self.dest, self.override_path)
        memberships = self.source.list_team_memberships()
        records = export_team_memberships(mappings, memberships)
        written = write_csv(self.output, TEAM_COLUMNS, team_rows(records))
        return {"memberships": len(memberships), "mapped": written}


class RepoAccessMappingTask(_MappingTask):
    TASK_NAME = "repo-access"

    def run(self) -> dict[str, int]:
        _, mappings = resolve_identities(self.source, self.dest, self.override_path)
        collaborators = []
        repos = self.source.list_repositories()
        for repo in repos:
            found = self.source.list_repository_collaborators(repo["name"])
            logger.debug(
                "%d direct collaborators on %s", len(found), repo["name"],
                extra={"repo": repo["name"], "records": len(found)},
            )
            collaborators.extend(found)
        records = export_repository_access(mappings, collaborators)
        written = write_csv(self.output, REPO_ACCESS_COLUMNS, repo_access_rows(records))
        return {
            "repositories": len(repos),
            "collaborators": len(collaborators),
            "mapped": written,
        }
