"""GitHub organisation listings: members, identities, teams, repos, secrets."""

from __future__ import annotations

import logging
from typing import Any, Optional
from urllib.parse import quote

from scripts.orgmigrate import queries
from scripts.orgmigrate.client import GitHubClient
from scripts.orgmigrate.errors import BadRequest
from scripts.orgmigrate.models import (
    DestinationIdentity,
    Mannequin,
    RepositoryAccessRecord,
    SourceIdentity,
    TeamMembershipRecord,
    normalize,
)
from scripts.orgmigrate.pagination import get_at

logger = logging.getLogger("orgmigrate.github")


class GitHubOrgProvider:
    """Read and write one organisation through a GitHubClient."""

    def __init__(self, client: GitHubClient) -> None:
        self.client = client
        self.org = client.org

    def _connection_items(self, query: queries.GraphQuery, field: str, **variables: Any) -> list[dict]:
        result = self.client.graphql(query, {"org": self.org, **variables})
        connection = get_at(result, query.connection_path or ()) or {}
        return connection.get(field) or []

    # ------------------------------------------------------------------
    # Identities
    # ------------------------------------------------------------------

    def list_members(self) -> list[DestinationIdentity]:
        edges = self._connection_items(queries.MEMBERS_WITH_ROLE, "edges")
        members = [DestinationIdentity.from_graph(e) for e in edges if e.get("node")]
        logger.info("Fetched %d members of %s", len(members), self.org,
                    extra={"org": self.org, "records": len(members)})
        return members

    def list_external_identities(self) -> list[SourceIdentity]:
        edges = self._connection_items(queries.EXTERNAL_IDENTITIES, "edges")
        identities = [SourceIdentity.from_graph(e["node"]) for e in edges if e.get("node")]
        if not edges:
            logger.warning("No SAML external identities found for %s", self.org,
                           extra={"org": self.org})
        logger.info("Fetched %d external identities of %s", len(identities), self.org,
                    extra={"org": self.org, "records": len(identities)})
        return identities

    def list_mannequins(self) -> list[Mannequin]:
        nodes = self._connection_items(queries.MANNEQUINS, "nodes")
        mannequins = [Mannequin.from_graph(n) for n in nodes if n]
        logger.info("Fetched %d mannequins of %s", len(mannequins), self.org,
                    extra={"org": self.org, "records": len(mannequins)})
        return mannequins

    # ------------------------------------------------------------------
    # Teams
    # ------------------------------------------------------------------

    def list_team_memberships(self) -> list[TeamMembershipRecord]:
        """Immediate team members with their team role; dest_login left empty."""
        records: list[TeamMembershipRecord] = []
        for team in self._connection_items(queries.TEAMS_WITH_MEMBERS, "nodes"):
            parent = team.get("parentTeam") or {}
            for edge in self._team_member_edges(team):
                login = (edge.get("node") or {}).get("login")
                if not login:
                    continue
                records.append(TeamMembershipRecord(
                    team=team["name"],
                    slug=team["slug"],
                    parent_team=parent.get("slug"),
                    role=edge.get("role") or "MEMBER",
                    source_login=login,
                    dest_login="",
                ))
        logger.info("Fetched %d team memberships of %s", len(records), self.org,
                    extra={"org": self.org, "records": len(records)})
        return records

    def _team_member_edges(self, team: dict) -> list[dict]:
        """Members embedded in the team listing, plus any further pages."""
        members = team.get("members") or {}
        edges = list(members.get("edges") or [])
        page_info = members.get("pageInfo") or {}
        if page_info.get("hasNextPage"):
            logger.debug("Team %s has more than %d members, paging", team["slug"], len(edges),
                         extra={"org": self.org})
            edges.extend(self._connection_items(
                queries.TEAM_MEMBERS,
                "edges",
                slug=team["slug"],
                endCursor=page_info.get("endCursor"),
            ))
        return edges

    def team_external_groups(self, slug: str) -> list[dict]:
        """External IdP groups linked to a team; a 400 means none."""
        try:
            result = self.client.rest(f"/orgs/{self.org}/teams/{slug}/external-groups")
        except BadRequest:
            return []
        return (result or {}).get("groups") or []

    def set_team_membership(self, slug: str, login: str, role: str) -> Any:
        return self.client.rest(
            f"/orgs/{self.org}/teams/{slug}/memberships/{login}",
            method="PUT",
            body={"role": role},
        )

    # ------------------------------------------------------------------
    # Repositories
    # ------------------------------------------------------------------

    def list_repositories(self) -> list[dict]:
        repos = self.client.rest(f"/orgs/{self.org}/repos?per_page=100") or []
        if isinstance(repos, dict):
            repos = [repos]
        logger.info("Fetched %d repositories of %s", len(repos), self.org,
                    extra={"org": self.org, "records": len(repos)})
        return repos

    def get_repository(self, name: str) -> dict:
        return self.client.rest(f"/repos/{self.org}/{name}")

    def set_visibility(self, name: str, visibility: str) -> Any:
        return self.client.rest(
            f"/repos/{self.org}/{name}",
            method="PATCH",
            body={"visibility": visibility},
        )

    def list_repository_collaborators(self, repo: str) -> list[RepositoryAccessRecord]:
        """Direct collaborators, keeping the first permission source per login."""
        edges = self._connection_items(queries.REPOSITORY_COLLABORATORS, "edges", repo=repo)
        records: list[RepositoryAccessRecord] = []
        seen: set[str] = set()
        for edge in edges:
            login = (edge.get("node") or {}).get("login")
            key = normalize(login)
            if key is None or key in seen:
                continue
            seen.add(key)
            records.append(RepositoryAccessRecord(
                repo=repo,
                permission=_direct_permission(edge),
                source_login=login,
                login="",
            ))
        return records

    def add_collaborator(self, repo: str, login: str, permission: str) -> Any:
        return self.client.rest(
            f"/repos/{self.org}/{repo}/collaborators/{login}",
            method="PUT",
            body={"permission": permission},
        )

    # ------------------------------------------------------------------
    # Secrets
    # ------------------------------------------------------------------

    def list_org_secrets(self, kind: str) -> list[dict]:
        result = self.client.rest(f"/orgs/{self.org}/{kind}/secrets?per_page=100")
        return (result or {}).get("secrets") or []

    def list_repo_secrets(self, repo: str, kind: str) -> list[dict]:
        result = self.client.rest(f"/repos/{self.org}/{repo}/{kind}/secrets?per_page=100")
        return (result or {}).get("secrets") or []

    def list_environments(self, repo: str) -> list[dict]:
        result = self.client.rest(f"/repos/{self.org}/{repo}/environments?per_page=100")
        return (result or {}).get("environments") or []

    def list_environment_secrets(self, repo_id: int, environment: str) -> list[dict]:
        result = self.client.rest(
            f"/repositories/{repo_id}/environments/{quote(environment, safe='')}/secrets?per_page=100"
        )
        return (result or {}).get("secrets") or []


def _direct_permission(edge: dict) -> str:
    for source in edge.get("permissionSources") or []:
        if (source.get("source") or {}).get("__typename") == "Repository":
            return source.get("permission") or edge.get("permission") or "READ"
    return edge.get("permission") or "READ"


def permission_for_rest(permission: Optional[str]) -> str:
    """Translate a GraphQL repository permission to the REST name."""
    return {
        "ADMIN": "admin",
        "MAINTAIN": "maintain",
        "WRITE": "push",
        "TRIAGE": "triage",
        "READ": "pull",
    }.get((permission or "").upper(), (permission or "pull").lower())
