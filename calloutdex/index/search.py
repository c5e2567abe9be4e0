"""Keyword search and filtering over indexed callouts."""

from typing import Collection, Iterable

from pydantic import BaseModel

from calloutdex.domain.callout import CalloutItem, HeadingRef
from calloutdex.domain.palette import default_color, default_icon, is_builtin_type


class SearchOptions(BaseModel):
    """Which callout fields a query is matched against."""

    in_filenames: bool = True
    in_titles: bool = True
    in_ids: bool = True
    in_content: bool = True
    in_headings: bool = False
    max_results: int | None = 50


class CalloutType(BaseModel):
    """A callout type with its default presentation."""

    name: str
    builtin: bool
    color: str
    icon: str

    @classmethod
    def of(cls, name: str) -> "CalloutType":
        return cls(
            name=name,
            builtin=is_builtin_type(name),
            color=default_color(name),
            icon=default_icon(name),
        )


def _searchable_fields(callout: CalloutItem, options: SearchOptions) -> list[str]:
    fields = []
    if options.in_filenames:
        fields.append(callout.document_path)
    if options.in_titles:
        fields.append(callout.title)
    if options.in_ids and callout.id:
        fields.append(callout.id)
    if options.in_content:
        fields.append(callout.body)
    if options.in_headings:
        fields.extend(heading.title for heading in callout.heading_path)
    return [field.lower() for field in fields]


def search_callouts(
    callouts: Iterable[CalloutItem],
    query: str = "",
    types: Collection[str] | None = None,
    options: SearchOptions | None = None,
) -> list[CalloutItem]:
    """Callouts matching every keyword in ``query``, optionally restricted to ``types``.

    Keywords are whitespace separated and case insensitive. Each one must
    occur in at least one enabled field. An empty query matches everything.
    """
    options = options or SearchOptions()
    keywords = query.lower().split()
    wanted_types = {t.lower() for t in types} if types else None

    results = []
    for callout in callouts:
        if wanted_types is not None and callout.type not in wanted_types:
            continue
        if keywords:
            fields = _searchable_fields(callout, options)
            if not all(any(keyword in field for field in fields) for keyword in keywords):
                continue
        results.append(callout)
        if options.max_results is not None and len(results) >= options.max_results:
            break
    return results


def visible_headings(heading_path: list[HeadingRef], levels: Collection[int]) -> list[HeadingRef]:
    """The part of a heading path shown when only some heading levels are displayed."""
    return [heading for heading in heading_path if heading.level in levels]


def group_by_type(callouts: Iterable[CalloutItem]) -> dict[str, list[CalloutItem]]:
    groups: dict[str, list[CalloutItem]] = {}
    for callout in callouts:
        groups.setdefault(callout.type, []).append(callout)
    return groups
