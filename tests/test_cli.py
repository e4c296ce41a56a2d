import pytest

from scripts.orgmigrate import cli
from scripts.orgmigrate.tasks.mappings import TeamMappingTask
from scripts.orgmigrate.tasks.permission_rebuild import RepoAccessApplyTask


@pytest.fixture(autouse=True)
def quiet(mocker, monkeypatch):
    mocker.patch("scripts.orgmigrate.cli.configure_logging")
    mocker.patch("scripts.orgmigrate.config.load_dotenv")
    for name in ("SOURCE_ORG", "DEST_ORG", "GITHUB_TOKEN", "DEBUG_CAPTURE_DIR"):
        monkeypatch.delenv(name, raising=False)


def test_parser_requires_a_command():
    with pytest.raises(SystemExit):
        cli.build_parser().parse_args([])


def test_apply_commands_require_mapping():
    with pytest.raises(SystemExit):
        cli.build_parser().parse_args(["apply-teams"])


def test_teams_command_builds_and_runs_task(mocker):
    run = mocker.patch.object(TeamMappingTask, "run", return_value={"mapped": 3})

    result = cli.run([
        "teams",
        "--source-org", "src", "--source-token", "s",
        "--dest-org", "dst", "--dest-token", "d",
        "--output", "out.csv",
        "--override", "override.csv",
    ])

    assert result == {"mapped": 3}
    run.assert_called_once_with()


def test_builder_wires_options(mocker):
    args = cli.build_parser().parse_args([
        "apply-repo-access", "--mapping", "access.csv", "--dry-run",
        "--dest-org", "dst", "--dest-token", "d",
    ])
    config = cli.load_config(dest_org=args.dest_org, dest_token=args.dest_token)
    limiter = cli.RateLimiter(0)

    task = args.build(args, config, limiter)

    assert isinstance(task, RepoAccessApplyTask)
    assert task.dry_run is True
    assert task.mapping_path == "access.csv"
    assert task.dest.org == "dst"


def test_missing_source_org_propagates():
    with pytest.raises(ValueError, match="source organisation not configured"):
        cli.run(["identities", "--dest-org", "dst", "--dest-token", "d"])


def test_missing_source_org_is_logged(mocker):
    exception = mocker.patch.object(cli.logger, "exception")

    with pytest.raises(ValueError):
        cli.run(["identities", "--dest-org", "dst", "--dest-token", "d"])

    exception.assert_called_once()
    cli.configure_logging.assert_called_once()


def test_missing_token_is_logged_with_requested_level(mocker, monkeypatch):
    for name in ("SOURCE_GITHUB_TOKEN", "DEST_GITHUB_TOKEN"):
        monkeypatch.delenv(name, raising=False)
    exception = mocker.patch.object(cli.logger, "exception")

    with pytest.raises(ValueError, match="SOURCE_GITHUB_TOKEN"):
        cli.run(["teams", "--source-org", "src", "--log-level", "DEBUG"])

    cli.configure_logging.assert_called_once_with("DEBUG")
    exception.assert_called_once()
