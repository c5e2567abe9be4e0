"""Resolving outlinks into relationships between callouts."""

import logging
from pathlib import PurePosixPath

from pydantic import BaseModel

from calloutdex.domain.callout import CalloutItem, Outlink, build_identity_index

logger = logging.getLogger(__name__)

CalloutKey = tuple[str, str]


class Relations(BaseModel):
    """Callouts related to a focal callout, split by direction."""

    outbound: list[CalloutItem] = []
    inbound: list[CalloutItem] = []
    bidirectional: list[CalloutItem] = []

    def __len__(self) -> int:
        return len(self.outbound) + len(self.inbound) + len(self.bidirectional)


class LinkResolver:
    """Resolves outlinks against an index of identified callouts.

    A link matches an exact ``(document, id)`` key first. Links written with
    a bare document name, or pointing at a document that has since moved,
    fall back to a callout with the same id in a document of the same name,
    and finally to the only callout carrying that id.
    """

    def __init__(self, callouts: list[CalloutItem]):
        self.by_key = build_identity_index(callouts)
        self._by_id: dict[str, list[CalloutItem]] = {}
        for callout in self.by_key.values():
            self._by_id.setdefault(callout.id, []).append(callout)

    def get(self, key: CalloutKey | None) -> CalloutItem | None:
        return self.by_key.get(key) if key else None

    def resolve(self, outlink: Outlink) -> CalloutItem | None:
        exact = self.by_key.get((outlink.target_file, outlink.target_id))
        if exact is not None:
            return exact

        candidates = self._by_id.get(outlink.target_id, [])
        name = PurePosixPath(outlink.target_file).name
        same_name = [c for c in candidates if PurePosixPath(c.document_path).name == name]
        if len(same_name) == 1:
            return same_name[0]
        if len(candidates) == 1:
            return candidates[0]
        return None

    def targets(self, source: CalloutItem) -> list[tuple[CalloutItem, str | None]]:
        """Resolved ``(target, label)`` pairs for the outlinks of ``source``, self links dropped."""
        resolved = []
        for outlink in source.outlinks:
            target = self.resolve(outlink)
            if target is None or target.key == source.key:
                continue
            resolved.append((target, outlink.label))
        return resolved


class EdgeLabels:
    """Labels for directed ``source -> target`` pairs.

    Labels found anywhere in the index win over labels that only appear in
    the focal callout as supplied by the caller, which may be out of date.
    """

    def __init__(self, resolver: LinkResolver, callouts: list[CalloutItem], focal: CalloutItem):
        self._indexed = self._collect(resolver, callouts)
        self._local = self._collect(resolver, [focal])

    @staticmethod
    def _collect(
        resolver: LinkResolver, callouts: list[CalloutItem]
    ) -> dict[tuple[CalloutKey, CalloutKey], str]:
        labels: dict[tuple[CalloutKey, CalloutKey], str] = {}
        for callout in callouts:
            if callout.key is None:
                continue
            for target, label in resolver.targets(callout):
                if label:
                    labels.setdefault((callout.key, target.key), label)
        return labels

    def get(self, source: CalloutKey, target: CalloutKey) -> str | None:
        pair = (source, target)
        return self._indexed.get(pair) or self._local.get(pair)


def find_relations(
    focal: CalloutItem, callouts: list[CalloutItem], resolver: LinkResolver | None = None
) -> Relations:
    """Split the callouts linked with ``focal`` into outbound, inbound and bidirectional.

    Each related callout appears in exactly one list, in index order for
    inbound and link order for outbound.
    """
    resolver = resolver or LinkResolver(callouts)
    focal_key = focal.key
    if focal_key is None:
        return Relations()

    outbound: dict[CalloutKey, CalloutItem] = {}
    sources = [focal]
    indexed_focal = resolver.get(focal_key)
    if indexed_focal is not None and indexed_focal is not focal:
        sources.append(indexed_focal)
    for source in sources:
        for target, _ in resolver.targets(source):
            outbound.setdefault(target.key, target)

    inbound: dict[CalloutKey, CalloutItem] = {}
    for callout in callouts:
        key = callout.key
        if key is None or key == focal_key or key in inbound:
            continue
        if any(target.key == focal_key for target, _ in resolver.targets(callout)):
            inbound[key] = resolver.get(key) or callout

    relations = Relations(
        outbound=[c for key, c in outbound.items() if key not in inbound],
        inbound=[c for key, c in inbound.items() if key not in outbound],
        bidirectional=[c for key, c in outbound.items() if key in inbound],
    )
    logger.debug(
        f"{focal_key}: {len(relations.outbound)} outbound, {len(relations.inbound)} inbound, "
        f"{len(relations.bidirectional)} bidirectional"
    )
    return relations
