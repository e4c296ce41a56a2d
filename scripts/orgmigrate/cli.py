"""CLI entry point: identity resolution, mapping exports, permission rebuild, audits."""

from __future__ import annotations

import argparse
import logging
import os
from typing import Callable, Optional, Sequence

from scripts.orgmigrate.base_task import BaseTask
from scripts.orgmigrate.client import GitHubClient
from scripts.orgmigrate.config import MigrationConfig, load_config
from scripts.orgmigrate.logging_config import configure_logging
from scripts.orgmigrate.providers.github_org import GitHubOrgProvider
from scripts.orgmigrate.rate_limiter import RateLimiter

logger = logging.getLogger("orgmigrate.cli")


def _provider(config: MigrationConfig, side: str, limiter: RateLimiter) -> GitHubOrgProvider:
    return GitHubOrgProvider(GitHubClient.from_config(config, side, limiter))


def build_identities(args, config, limiter) -> BaseTask:
    from scripts.orgmigrate.tasks.identities import IdentityReportTask
    return IdentityReportTask(
        config,
        _provider(config, "source", limiter),
        _provider(config, "dest", limiter),
        output=args.output or "identity-map.csv",
        override_path=args.override,
    )


def build_mannequins(args, config, limiter) -> BaseTask:
    from scripts.orgmigrate.tasks.mappings import MannequinMappingTask
    return MannequinMappingTask(
        config,
        _provider(config, "source", limiter),
        _provider(config, "dest", limiter),
        output=args.output or "mannequin-mapping.csv",
        override_path=args.override,
    )


def build_teams(args, config, limiter) -> BaseTask:
    from scripts.orgmigrate.tasks.mappings import TeamMappingTask
    return TeamMappingTask(
        config,
        _provider(config, "source", limiter),
        _provider(config, "dest", limiter),
        output=args.output or "team-mapping.csv",
        override_path=args.override,
    )


def build_repo_access(args, config, limiter) -> BaseTask:
    from scripts.orgmigrate.tasks.mappings import RepoAccessMappingTask
    return RepoAccessMappingTask(
        config,
        _provider(config, "source", limiter),
        _provider(config, "dest", limiter),
        output=args.output or "repo-access-mapping.csv",
        override_path=args.override,
    )


def build_apply_teams(args, config, limiter) -> BaseTask:
    from scripts.orgmigrate.tasks.permission_rebuild import TeamMembershipApplyTask
    return TeamMembershipApplyTask(
        config,
        _provider(config, "dest", limiter),
        mapping_path=args.mapping,
        dry_run=args.dry_run,
    )


def build_apply_repo_access(args, config, limiter) -> BaseTask:
    from scripts.orgmigrate.tasks.permission_rebuild import RepoAccessApplyTask
    return RepoAccessApplyTask(
        config,
        _provider(config, "dest", limiter),
        mapping_path=args.mapping,
        dry_run=args.dry_run,
    )


def build_secrets(args, config, limiter) -> BaseTask:
    from scripts.orgmigrate.tasks.secret_audit import SecretAuditTask
    dest = _provider(config, "dest", limiter) if config.dest else None
    return SecretAuditTask(
        config,
        _provider(config, "source", limiter),
        output=args.output or "secret-audit.csv",
        dest=dest,
    )


def build_visibility(args, config, limiter) -> BaseTask:
    from scripts.orgmigrate.tasks.visibility import VisibilityTask
    return VisibilityTask(
        config,
        _provider(config, "source", limiter),
        _provider(config, "dest", limiter),
        output=args.output,
        dry_run=args.dry_run,
    )


COMMANDS: dict[str, tuple[Callable[..., BaseTask], str]] = {
    "identities": (build_identities, "Resolve source identities to destination members"),
    "mannequins": (build_mannequins, "Export the mannequin reclaim mapping"),
    "teams": (build_teams, "Export the team membership mapping"),
    "repo-access": (build_repo_access, "Export the repository access mapping"),
    "apply-teams": (build_apply_teams, "Add users to destination teams from a team mapping"),
    "apply-repo-access": (build_apply_repo_access, "Grant repository access from a mapping"),
    "secrets": (build_secrets, "Audit secret inventories of source vs destination"),
    "visibility": (build_visibility, "Reconcile destination repository visibility"),
}

_WITH_OVERRIDE = {"identities", "mannequins", "teams", "repo-access"}
_WITH_MAPPING = {"apply-teams", "apply-repo-access"}
_WITH_DRY_RUN = {"apply-teams", "apply-repo-access", "visibility"}


def build_parser() -> argparse.ArgumentParser:
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--source-org", help="Source organisation (default: $SOURCE_ORG)")
    common.add_argument("--dest-org", help="Destination organisation (default: $DEST_ORG)")
    common.add_argument("--source-token", help="Source token (default: $SOURCE_GITHUB_TOKEN)")
    common.add_argument("--dest-token", help="Destination token (default: $DEST_GITHUB_TOKEN)")
    common.add_argument("--output", "-o", help="Output CSV path")
    common.add_argument(
        "--debug-capture",
        metavar="DIR",
        help="Write every raw API response to numbered files in DIR",
    )
    common.add_argument("--log-level", help="Log level (default: $LOG_LEVEL or INFO)")

    parser = argparse.ArgumentParser(
        prog="orgmigrate",
        description="GitHub organisation migration: identities, teams, access, secrets",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)
    for name, (builder, help_text) in COMMANDS.items():
        sub = subparsers.add_parser(name, help=help_text, parents=[common])
        if name in _WITH_OVERRIDE:
            sub.add_argument(
                "--override",
                metavar="CSV",
                help="CSV with source,dest columns overriding resolved pairs",
            )
        if name in _WITH_MAPPING:
            sub.add_argument("--mapping", required=True, metavar="CSV",
                             help="Mapping CSV produced by the export command")
        if name in _WITH_DRY_RUN:
            sub.add_argument("--dry-run", action="store_true",
                             help="Log intended changes without applying them")
        sub.set_defaults(build=builder)
    return parser


def run(argv: Optional[Sequence[str]] = None) -> dict[str, int]:
    """Parse arguments, build the task and run it. Failures propagate."""
    args = build_parser().parse_args(argv)
    try:
        config = load_config(
            source_org=args.source_org,
            dest_org=args.dest_org,
            source_token=args.source_token,
            dest_token=args.dest_token,
            debug_capture_dir=args.debug_capture,
            log_level=args.log_level,
        )
    except ValueError:
        configure_logging(args.log_level or os.environ.get("LOG_LEVEL", "INFO"))
        logger.exception("Invalid configuration for %s", args.command)
        raise
    configure_logging(config.log_level)

    logger.debug("Running command %s", args.command)
    limiter = RateLimiter(config.mutation_interval_s)
    try:
        task = args.build(args, config, limiter)
    except ValueError:
        logger.exception("Invalid configuration for %s", args.command)
        raise
    return task.run_with_tracking()


def main() -> None:
    """Main CLI entry point."""
    run()


if __name__ == "__main__":
    main()
