import pytest

from scripts.orgmigrate.identity_resolver import IdentityResolver
from scripts.orgmigrate.models import DestinationIdentity, SourceIdentity


def src(login, username=None, name_id=None, email=None):
    return SourceIdentity(
        name_id=name_id,
        username=username,
        given_name=None,
        primary_email=email,
        login=login,
    )


def dst(login, email=None, verified=None, role="MEMBER"):
    return DestinationIdentity(
        login=login,
        name=None,
        email=email,
        verified_domain_email=verified,
        role=role,
    )


def test_alice_resolves_and_bob_is_removed():
    alice = src("alice", username="alice@co")
    bob = src(None, username="bob@co")
    alice2 = dst("alice2", verified="alice@co")

    result = IdentityResolver().resolve([alice, bob], [alice2])

    assert [(m.source_name, m.dest_name) for m in result.resolved] == [("alice", "alice2")]
    assert result.resolved[0].source_identity is alice
    assert result.resolved[0].dest_identity is alice2
    assert result.unresolved_source == []
    assert result.removed_source == [bob]
    assert result.unresolved_dest == []


def test_verified_domain_email_wins_over_public_email():
    member = dst("carol-emu", email="carol@gmail.com", verified="carol@corp.com")
    assert member.resolved_email == "carol@corp.com"

    result = IdentityResolver().resolve([src("carol", username="carol@corp.com")], [member])
    assert len(result.resolved) == 1


def test_public_email_used_without_verified_email():
    result = IdentityResolver().resolve(
        [src("dave", username="dave@corp.com")],
        [dst("dave2", email="dave@corp.com")],
    )
    assert result.resolved[0].dest_name == "dave2"


def test_name_id_also_matches():
    result = IdentityResolver().resolve(
        [src("erin", username="erin", name_id="erin@corp.com")],
        [dst("erin-new", verified="erin@corp.com")],
    )
    assert result.resolved[0].dest_name == "erin-new"


def test_matching_is_case_insensitive():
    result = IdentityResolver().resolve(
        [src("Frank", username="Frank@Corp.COM")],
        [dst("Frank_Corp", verified="frank@corp.com")],
    )
    assert [(m.source_name, m.dest_name) for m in result.resolved] == [("frank", "frank_corp")]


def test_destination_is_claimed_only_once():
    first = src("gina", username="shared@corp.com")
    second = src("gina2", name_id="shared@corp.com")
    target = dst("gina-dest", verified="shared@corp.com")

    result = IdentityResolver().resolve([first, second], [target])

    assert [m.source_name for m in result.resolved] == ["gina"]
    assert result.unresolved_source == [second]
    assert result.unresolved_dest == []


def test_first_destination_in_listing_order_wins():
    a = dst("hank-a", email="hank@corp.com")
    b = dst("hank-b", verified="hank@corp.com")

    result = IdentityResolver().resolve([src("hank", username="hank@corp.com")], [a, b])

    assert result.resolved[0].dest_identity is a
    assert result.unresolved_dest == [b]


def test_absent_keys_never_match_each_other():
    result = IdentityResolver().resolve(
        [src("ivan")],
        [dst("ivan-dest")],
    )
    assert result.resolved == []
    assert len(result.unresolved_source) == 1
    assert len(result.unresolved_dest) == 1


@pytest.mark.parametrize("sources,dests", [
    (
        [src("a", username="a@x"), src(None, username="b@x"), src("c", name_id="c@x"),
         src("d", username="zz@x"), src("e", username="a@x")],
        [dst("a1", verified="a@x"), dst("c1", email="c@x"), dst("q1", email="q@x"), dst("n1")],
    ),
    ([], [dst("only", email="only@x")]),
    ([src("lonely", username="l@x")], []),
    ([src(None), src(None)], [dst("x", email="x@x"), dst("y", email="x@x")]),
])
def test_every_identity_lands_in_exactly_one_bucket(sources, dests):
    result = IdentityResolver().resolve(sources, dests)

    source_buckets = (
        [m.source_identity for m in result.resolved]
        + result.unresolved_source
        + result.removed_source
    )
    assert sorted(map(id, source_buckets)) == sorted(map(id, sources))

    dest_buckets = [m.dest_identity for m in result.resolved] + result.unresolved_dest
    assert sorted(map(id, dest_buckets)) == sorted(map(id, dests))

    counts = result.counts()
    assert counts["resolved"] + counts["unresolved_source"] + counts["removed_source"] == len(sources)
