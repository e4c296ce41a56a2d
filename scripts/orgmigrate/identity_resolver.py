"""Cross-organisation identity resolution.

Matches source-org SAML identities to destination-org members by email.
A source identity resolves to the first unclaimed destination member whose
verified-domain email (or public email) equals the identity's SAML
username or nameId. Every identity ends up in exactly one bucket.
"""

from __future__ import annotations

import logging
from typing import Optional, Sequence

from scripts.orgmigrate.models import (
    DestinationIdentity,
    ResolutionResult,
    ResolvedMapping,
    SourceIdentity,
    normalize,
)

logger = logging.getLogger("orgmigrate.identity_resolver")


class IdentityResolver:
    def resolve(
        self,
        sources: Sequence[SourceIdentity],
        destinations: Sequence[DestinationIdentity],
    ) -> ResolutionResult:
        """Classify every identity into resolved / unresolved / removed."""
        result = ResolutionResult()
        dest_keys = [normalize(d.resolved_email) for d in destinations]
        claimed: set[int] = set()

        for source in sources:
            login = normalize(source.login)
            if login is None:
                result.removed_source.append(source)
                continue

            index = self._find_match(source, dest_keys, claimed)
            if index is None:
                result.unresolved_source.append(source)
                continue

            claimed.add(index)
            dest = destinations[index]
            result.resolved.append(ResolvedMapping(
                source_name=login,
                dest_name=normalize(dest.login) or dest.login,
                source_identity=source,
                dest_identity=dest,
            ))

        result.unresolved_dest = [
            d for i, d in enumerate(destinations) if i not in claimed
        ]

        logger.info(
            "Resolved %d identities (%d unresolved source, %d unresolved destination, "
            "%d without login)",
            len(result.resolved),
            len(result.unresolved_source),
            len(result.unresolved_dest),
            len(result.removed_source),
            extra={"records": len(result.resolved)},
        )
        return result

    @staticmethod
    def _find_match(
        source: SourceIdentity,
        dest_keys: list[Optional[str]],
        claimed: set[int],
    ) -> Optional[int]:
        keys = {k for k in (normalize(source.username), normalize(source.name_id)) if k}
        if not keys:
            return None
        for index, key in enumerate(dest_keys):
            if index in claimed or key is None:
                continue
            if key in keys:
                return index
        return None
