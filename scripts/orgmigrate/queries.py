"""GraphQL queries and the connection each one paginates."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class GraphQuery:
    """A named query with the key path to its paginated connection.

    connection_path=None leaves the connection to be discovered by
    searching the response.
    """

    name: str
    text: str
    connection_path: Optional[tuple[str, ...]] = None


MEMBERS_WITH_ROLE = GraphQuery(
    name="members_with_role",
    text="""
query($org: String!, $endCursor: String) {
  organization(login: $org) {
    membersWithRole(first: 100, after: $endCursor) {
      pageInfo { hasNextPage endCursor }
      edges {
        role
        node {
          login
          name
          email
          organizationVerifiedDomainEmails(login: $org)
        }
      }
    }
  }
}
""",
    connection_path=("data", "organization", "membersWithRole"),
)

EXTERNAL_IDENTITIES = GraphQuery(
    name="external_identities",
    text="""
query($org: String!, $endCursor: String) {
  organization(login: $org) {
    samlIdentityProvider {
      externalIdentities(first: 100, after: $endCursor) {
        pageInfo { hasNextPage endCursor }
        edges {
          node {
            guid
            samlIdentity {
              nameId
              username
              givenName
              familyName
              emails { primary value }
            }
            user { login }
          }
        }
      }
    }
  }
}
""",
    connection_path=("data", "organization", "samlIdentityProvider", "externalIdentities"),
)

MANNEQUINS = GraphQuery(
    name="mannequins",
    text="""
query($org: String!, $endCursor: String) {
  organization(login: $org) {
    mannequins(first: 100, after: $endCursor) {
      pageInfo { hasNextPage endCursor }
      nodes {
        id
        databaseId
        email
        login
        claimant { login }
      }
    }
  }
}
""",
    connection_path=("data", "organization", "mannequins"),
)

TEAMS_WITH_MEMBERS = GraphQuery(
    name="teams_with_members",
    text="""
query($org: String!, $endCursor: String) {
  organization(login: $org) {
    teams(first: 50, after: $endCursor) {
      pageInfo { hasNextPage endCursor }
      nodes {
        name
        slug
        parentTeam { slug }
        members(first: 100, membership: IMMEDIATE) {
          pageInfo { hasNextPage endCursor }
          edges {
            role
            node { login }
          }
        }
      }
    }
  }
}
""",
    connection_path=("data", "organization", "teams"),
)

TEAM_MEMBERS = GraphQuery(
    name="team_members",
    text="""
query($org: String!, $slug: String!, $endCursor: String) {
  organization(login: $org) {
    team(slug: $slug) {
      members(first: 100, after: $endCursor, membership: IMMEDIATE) {
        pageInfo { hasNextPage endCursor }
        edges {
          role
          node { login }
        }
      }
    }
  }
}
""",
    connection_path=("data", "organization", "team", "members"),
)

REPOSITORY_COLLABORATORS = GraphQuery(
    name="repository_collaborators",
    text="""
query($org: String!, $repo: String!, $endCursor: String) {
  repository(owner: $org, name: $repo) {
    collaborators(first: 100, after: $endCursor, affiliation: DIRECT) {
      pageInfo { hasNextPage endCursor }
      edges {
        permission
        permissionSources {
          permission
          source {
            __typename
            ... on Repository { nameWithOwner }
            ... on Team { slug }
            ... on Organization { login }
          }
        }
        node { login }
      }
    }
  }
}
""",
    connection_path=("data", "repository", "collaborators"),
)
