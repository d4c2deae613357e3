"""Profile list filtering and sorting.

Pure functions over an in-memory collection: the same engine backs the
``GET /api/profiles/`` query arguments and the client-side ``ProfileStore``.
"""
from __future__ import annotations

from typing import Dict, Iterable, List, Sequence

from ..domain.profile import FilterSelection, Profile, SortKey


def _matches_search(profile: Profile, needle: str) -> bool:
    if needle in (profile.name or "").lower():
        return True
    if needle in (profile.producer or "").lower():
        return True
    return any(needle in printer.lower() for printer in profile.printers or ())


def matches(profile: Profile, selection: FilterSelection) -> bool:
    """True when ``profile`` passes every active facet and the search term."""
    if selection.producer is not None and profile.producer != selection.producer:
        return False
    if selection.material is not None and profile.material != selection.material:
        return False
    if selection.printer is not None and selection.printer not in (profile.printers or ()):
        return False
    if selection.search.strip():
        return _matches_search(profile, selection.search.lower())
    return True


def filter_and_sort(profiles: Sequence[Profile], selection: FilterSelection) -> List[Profile]:
    """Return the visible subset of ``profiles`` in display order.

    ``profiles`` is expected in fetch order (newest first), which is kept for
    ``SortKey.NEWEST``. The other keys use a stable sort, so equal scores keep
    their relative input order.
    """
    visible = [p for p in profiles if matches(p, selection)]

    if selection.sort is SortKey.VOTES:
        visible.sort(key=lambda p: -(p.upvotes - p.downvotes))
    elif selection.sort is SortKey.DOWNLOADS:
        visible.sort(key=lambda p: -p.download_count)
    return visible


def facet_values(profiles: Iterable[Profile]) -> Dict[str, List[str]]:
    """Distinct producers, materials and printers present in ``profiles``."""
    producers, materials, printers = set(), set(), set()
    for p in profiles:
        if p.producer:
            producers.add(p.producer)
        if p.material:
            materials.add(p.material)
        printers.update(x for x in p.printers or () if x)
    return {
        "producers": sorted(producers),
        "materials": sorted(materials),
        "printers": sorted(printers),
    }
