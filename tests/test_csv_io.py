import csv

from scripts.orgmigrate.csv_io import (
    TEAM_COLUMNS,
    load_overrides,
    read_repo_access_mapping,
    read_team_mapping,
    write_csv,
)


def test_load_overrides_discards_incomplete_and_duplicate_rows(tmp_path):
    path = tmp_path / "overrides.csv"
    path.write_text(
        "source,dest\n"
        "Alice,alice-corp\n"
        "bob,\n"
        ",carol-corp\n"
        "alice,alice-other\n"
        "dave , DAVE-CORP\n",
        encoding="utf-8",
    )

    assert load_overrides(str(path)) == [("alice", "alice-corp"), ("dave", "dave-corp")]


def test_write_csv_uses_fixed_header(tmp_path):
    path = tmp_path / "teams.csv"
    count = write_csv(str(path), TEAM_COLUMNS, [
        {"Team": "Core", "Slug": "core", "Role": "MEMBER", "Source": "a", "Destination": "b"},
    ])

    assert count == 1
    with open(path, newline="", encoding="utf-8") as fh:
        rows = list(csv.reader(fh))
    assert rows == [TEAM_COLUMNS, ["Core", "core", "MEMBER", "a", "b"]]


def test_read_team_mapping(tmp_path):
    path = tmp_path / "teams.csv"
    path.write_text(
        "Team,Slug,Role,Source,Destination\nCore,core,MAINTAINER,alice,alice_corp\n",
        encoding="utf-8",
    )
    [record] = read_team_mapping(str(path))
    assert (record.slug, record.role, record.dest_login) == ("core", "MAINTAINER", "alice_corp")


def test_read_repo_access_mapping_strips_bom(tmp_path):
    path = tmp_path / "access.csv"
    path.write_bytes(
        "\ufeffRepository,Permission,Source,Destination\napi,WRITE,alice,alice_corp\n".encode("utf-8")
    )
    [record] = read_repo_access_mapping(str(path))
    assert (record.repo, record.permission, record.login) == ("api", "WRITE", "alice_corp")
