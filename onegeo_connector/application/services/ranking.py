"""Ranking and targeted selection of download candidates."""

from onegeo_connector.application.services.priority import (
    DEFAULT_TABLES,
    PriorityTables,
    ResolverFlags,
)
from onegeo_connector.domain.entities import Candidate, DownloadTarget, Link
from onegeo_connector.domain.errors import NotFoundError

_DEFAULT_FLAGS = ResolverFlags()


def best_format_rank(link: Link, tables: PriorityTables = DEFAULT_TABLES) -> int:
    """Lowest format rank among a link's formats (len(table) if none is known)."""
    return min((tables.format_rank(f) for f in link.formats), default=len(tables.formats))


def _eligible_links(
    links: list[Link] | tuple[Link, ...],
    tables: PriorityTables,
    flags: ResolverFlags,
) -> list[Link]:
    eligible = []
    for link in links:
        if flags.main_links_only and not link.is_main:
            continue
        if not tables.supports_service(link.service):
            continue
        if not any(tables.supports_format(f) for f in link.formats):
            continue
        eligible.append(link)
    return eligible


def _link_sort_key(link: Link, tables: PriorityTables, flags: ResolverFlags) -> tuple[int, ...]:
    key = (best_format_rank(link, tables), tables.service_rank(link.service))
    if flags.direct_links_last:
        return (int(link.is_direct),) + key
    return key


def rank(
    links: list[Link] | tuple[Link, ...],
    tables: PriorityTables = DEFAULT_TABLES,
    flags: ResolverFlags = _DEFAULT_FLAGS,
) -> list[Candidate]:
    """Order a record's links into download candidates, best first.

    Links are sorted by (best format rank, service rank); the format rank
    dominates. Each ranked link then expands into one candidate per known
    format, in format priority order. The sort is stable so links with equal
    keys keep their catalog order.
    """
    ranked_links = sorted(
        _eligible_links(links, tables, flags),
        key=lambda link: _link_sort_key(link, tables, flags),
    )

    candidates = []
    for link in ranked_links:
        sort_key = _link_sort_key(link, tables, flags)
        for format_tag in tables.sort_formats(link.formats):
            candidates.append(
                Candidate(
                    link=link,
                    format=format_tag,
                    sort_key=sort_key,
                    format_rank=tables.format_rank(format_tag),
                )
            )
    return candidates


def select_target(
    links: list[Link] | tuple[Link, ...],
    target: DownloadTarget,
    tables: PriorityTables = DEFAULT_TABLES,
    flags: ResolverFlags = _DEFAULT_FLAGS,
) -> Candidate:
    """Resolve a caller-pinned service and/or format to exactly one candidate.

    Ranking is bypassed: the pinned fields must resolve as given or the
    selection fails with NotFoundError.
    """
    if not target.is_pinned:
        raise NotFoundError(f"No service or format pinned for dataset {target.dataset_id}")

    usable = [link for link in links if link.is_main or not flags.main_links_only]

    if target.service:
        matching = [
            link
            for link in usable
            if link.service == target.service or link.url == target.service
        ]
        if not matching:
            raise NotFoundError(
                f"Service {target.service!r} not found for dataset {target.dataset_id}"
            )
        # Several links may share a service tag; keep the best ranked one
        matching.sort(key=lambda link: _link_sort_key(link, tables, flags))

        if target.format:
            for link in matching:
                if target.format in link.formats:
                    return _make_candidate(link, target.format, tables, flags)
            raise NotFoundError(
                f"Format {target.format!r} not offered by service {target.service!r} "
                f"for dataset {target.dataset_id}"
            )

        for link in matching:
            formats = tables.sort_formats(link.formats)
            if formats:
                return _make_candidate(link, formats[0], tables, flags)
        raise NotFoundError(
            f"Service {target.service!r} offers no supported format for dataset {target.dataset_id}"
        )

    for candidate in rank(links, tables, flags):
        if candidate.format == target.format:
            return candidate
    raise NotFoundError(f"Format {target.format!r} not found for dataset {target.dataset_id}")


def _make_candidate(
    link: Link,
    format_tag: str,
    tables: PriorityTables,
    flags: ResolverFlags,
) -> Candidate:
    return Candidate(
        link=link,
        format=format_tag,
        sort_key=_link_sort_key(link, tables, flags),
        format_rank=tables.format_rank(format_tag),
    )
