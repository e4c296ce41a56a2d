from scripts.orgmigrate.exporters import (
    MappingIndex,
    export_mannequins,
    export_repository_access,
    export_team_memberships,
    mannequin_rows,
    merge_overrides,
    repo_access_rows,
    team_rows,
)
from scripts.orgmigrate.models import (
    Mannequin,
    RepositoryAccessRecord,
    ResolvedMapping,
    TeamMembershipRecord,
)

MAPPINGS = [
    ResolvedMapping("alice", "alice_corp"),
    ResolvedMapping("bob", "bob_corp"),
]


def mannequin(login, claimant=None, id_="MDg6TWFubmVxdWluMQ=="):
    return Mannequin(id=id_, database_id=1, email=None, login=login, claimant=claimant)


def test_override_replaces_resolved_pair():
    merged = merge_overrides(MAPPINGS, [("alice", "alice-override")])

    assert [(m.source_name, m.dest_name, m.origin) for m in merged] == [
        ("alice", "alice-override", "override"),
        ("bob", "bob_corp", "auto"),
    ]
    index = MappingIndex(merged)
    assert index.lookup("ALICE").dest_name == "alice-override"


def test_override_adds_unresolved_login():
    merged = merge_overrides(MAPPINGS, [("Carol", "Carol_Corp")])
    assert merged[-1] == ResolvedMapping("carol", "carol_corp", origin="override")


def test_override_wins_in_final_team_export():
    memberships = [TeamMembershipRecord("Core", "core", None, "MAINTAINER", "alice", "")]
    merged = merge_overrides(MAPPINGS, [("alice", "alice-override")])

    records = export_team_memberships(merged, memberships)

    assert team_rows(records) == [{
        "Team": "Core",
        "Slug": "core",
        "Role": "MAINTAINER",
        "Source": "alice",
        "Destination": "alice-override",
    }]


def test_mapping_index_keeps_first_match():
    index = MappingIndex([ResolvedMapping("dup", "first"), ResolvedMapping("dup", "second")])
    assert index.lookup("dup").dest_name == "first"
    assert index.lookup(None) is None
    assert len(index) == 1


def test_mannequins_skip_bots_and_claimed():
    pairs = export_mannequins(MAPPINGS, [
        mannequin("alice", id_="M1"),
        mannequin("dependabot[bot]", id_="M2"),
        mannequin("bob", claimant="bob_corp", id_="M3"),
        mannequin("stranger", id_="M4"),
    ])

    assert mannequin_rows(pairs) == [
        {"mannequin-user": "alice", "mannequin-id": "M1", "target-user": "alice_corp"},
    ]


def test_unresolved_team_members_are_dropped():
    memberships = [
        TeamMembershipRecord("Core", "core", None, "MEMBER", "Bob", ""),
        TeamMembershipRecord("Core", "core", None, "MEMBER", "nobody", ""),
        TeamMembershipRecord("Web", "web", "core", "MEMBER", "alice", ""),
    ]

    records = export_team_memberships(MAPPINGS, memberships)

    assert [(r.slug, r.source_login, r.dest_login, r.parent_team) for r in records] == [
        ("core", "Bob", "bob_corp", None),
        ("web", "alice", "alice_corp", "core"),
    ]


def test_repository_access_substitutes_destination_login():
    collaborators = [
        RepositoryAccessRecord("api", "WRITE", "alice", ""),
        RepositoryAccessRecord("api", "ADMIN", "ghost", ""),
    ]

    records = export_repository_access(MAPPINGS, collaborators)

    assert repo_access_rows(records) == [
        {"Repository": "api", "Permission": "WRITE", "Source": "alice", "Destination": "alice_corp"},
    ]
