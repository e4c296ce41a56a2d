"""Snapshot records built from API listings on every run."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional


def normalize(value: Optional[str]) -> Optional[str]:
    """Lowercase a join key; empty values become None so they never match."""
    if not value:
        return None
    value = value.strip().lower()
    return value or None


@dataclass(frozen=True)
class SourceIdentity:
    """SAML external identity from the source organisation."""

    name_id: Optional[str]
    username: Optional[str]
    given_name: Optional[str]
    primary_email: Optional[str]
    login: Optional[str]

    @classmethod
    def from_graph(cls, node: dict[str, Any]) -> "SourceIdentity":
        saml = node.get("samlIdentity") or {}
        emails = saml.get("emails") or []
        primary = next((e.get("value") for e in emails if e.get("primary")), None)
        if primary is None and emails:
            primary = emails[0].get("value")
        user = node.get("user") or {}
        return cls(
            name_id=normalize(saml.get("nameId")),
            username=normalize(saml.get("username")),
            given_name=saml.get("givenName"),
            primary_email=normalize(primary),
            login=normalize(user.get("login")),
        )


@dataclass(frozen=True)
class DestinationIdentity:
    """Member of the destination organisation."""

    login: str
    name: Optional[str]
    email: Optional[str]
    verified_domain_email: Optional[str]
    role: Optional[str]

    @property
    def resolved_email(self) -> Optional[str]:
        return self.verified_domain_email or self.email

    @classmethod
    def from_graph(cls, edge: dict[str, Any]) -> "DestinationIdentity":
        node = edge.get("node") or {}
        verified = node.get("organizationVerifiedDomainEmails") or []
        return cls(
            login=normalize(node.get("login")) or "",
            name=node.get("name"),
            email=normalize(node.get("email")),
            verified_domain_email=normalize(verified[0]) if verified else None,
            role=edge.get("role"),
        )


@dataclass(frozen=True)
class ResolvedMapping:
    source_name: str
    dest_name: str
    source_identity: Optional[SourceIdentity] = None
    dest_identity: Optional[DestinationIdentity] = None
    origin: str = "auto"


@dataclass
class ResolutionResult:
    resolved: list[ResolvedMapping] = field(default_factory=list)
    unresolved_source: list[SourceIdentity] = field(default_factory=list)
    unresolved_dest: list[DestinationIdentity] = field(default_factory=list)
    removed_source: list[SourceIdentity] = field(default_factory=list)

    def counts(self) -> dict[str, int]:
        return {
            "resolved": len(self.resolved),
            "unresolved_source": len(self.unresolved_source),
            "unresolved_dest": len(self.unresolved_dest),
            "removed_source": len(self.removed_source),
        }


@dataclass(frozen=True)
class Mannequin:
    id: str
    database_id: Optional[int]
    email: Optional[str]
    login: str
    claimant: Optional[str]

    @classmethod
    def from_graph(cls, node: dict[str, Any]) -> "Mannequin":
        claimant = node.get("claimant") or {}
        return cls(
            id=node["id"],
            database_id=node.get("databaseId"),
            email=normalize(node.get("email")),
            login=node.get("login") or "",
            claimant=claimant.get("login"),
        )


@dataclass(frozen=True)
class TeamMembershipRecord:
    team: str
    slug: str
    parent_team: Optional[str]
    role: str
    source_login: str
    dest_login: str


@dataclass(frozen=True)
class RepositoryAccessRecord:
    repo: str
    permission: str
    source_login: str
    login: str


@dataclass(frozen=True)
class SecretRecord:
    scope: str
    kind: str
    repo: str
    environment: str
    name: str

    @property
    def key(self) -> tuple[str, str, str, str, str]:
        return (self.scope, self.kind, self.repo.lower(), self.environment.lower(), self.name.upper())
