"""Secret inventory audit: which source secrets still need recreating.

Secret values cannot be read through the API; only names are compared.
"""

from __future__ import annotations

import logging
from typing import Optional

from scripts.orgmigrate.base_task import BaseTask
from scripts.orgmigrate.config import MigrationConfig
from scripts.orgmigrate.csv_io import SECRET_COLUMNS, write_csv
from scripts.orgmigrate.models import SecretRecord
from scripts.orgmigrate.providers.github_org import GitHubOrgProvider

logger = logging.getLogger("orgmigrate.secret_audit")

SECRET_KINDS = ("actions", "dependabot")


def inventory(provider: GitHubOrgProvider) -> list[SecretRecord]:
    """Organisation, repository and environment secrets of one org."""
    records: list[SecretRecord] = []
    for kind in SECRET_KINDS:
        for secret in provider.list_org_secrets(kind):
            records.append(SecretRecord("organization", kind, "", "", secret["name"]))

    for repo in provider.list_repositories():
        name = repo["name"]
        for kind in SECRET_KINDS:
            for secret in provider.list_repo_secrets(name, kind):
                records.append(SecretRecord("repository", kind, name, "", secret["name"]))
        for env in provider.list_environments(name):
            for secret in provider.list_environment_secrets(repo["id"], env["name"]):
                records.append(
                    SecretRecord("environment", "actions", name, env["name"], secret["name"])
                )

    logger.info("Found %d secrets in %s", len(records), provider.org,
                extra={"org": provider.org, "records": len(records)})
    return records


class SecretAuditTask(BaseTask):
    TASK_NAME = "secrets"

    def __init__(
        self,
        config: MigrationConfig,
        source: GitHubOrgProvider,
        output: str,
        dest: Optional[GitHubOrgProvider] = None,
    ) -> None:
        super().__init__(config)
        self.source = source
        self.dest = dest
        self.output = output

    def run(self) -> dict[str, int]:
        source_secrets = inventory(self.source)
        dest_keys = None
        if self.dest is not None:
            dest_keys = {r.key for r in inventory(self.dest)}

        missing = 0
        rows = []
        for record in source_secrets:
            present = ""
            if dest_keys is not None:
                found = record.key in dest_keys
                present = "yes" if found else "no"
                if not found:
                    missing += 1
                    logger.warning(
                        "Secret %s (%s %s %s) missing in %s",
                        record.name, record.scope, record.repo, record.environment,
                        self.dest.org,
                        extra={"org": self.dest.org, "repo": record.repo or None},
                    )
            rows.append({
                "Scope": record.scope,
                "Kind": record.kind,
                "Repository": record.repo,
                "Environment": record.environment,
                "Name": record.name,
                "Present In Destination": present,
            })

        write_csv(self.output, SECRET_COLUMNS, rows)
        return {"secrets": len(source_secrets), "missing": missing}
