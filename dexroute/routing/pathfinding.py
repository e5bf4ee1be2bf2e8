"""Candidate path enumeration through hub assets.

Candidates are produced in a fixed order: the direct path, then every
2-hop path in hub order, then every 3-hop path over ordered pairs of
distinct hubs. That order is part of the tie-break, so it must stay
stable for identical inputs.
"""

from __future__ import annotations

from collections.abc import Sequence

from dexroute.constants import MAX_HOPS_CAP


def unique_hubs(hubs: Sequence[str], exclude: Sequence[str] = ()) -> list[str]:
    """Deduplicate hubs preserving order, dropping any in `exclude`."""
    seen = set(exclude)
    result = []
    for hub in hubs:
        if hub not in seen:
            seen.add(hub)
            result.append(hub)
    return result


def candidate_paths(
    token_in: str,
    token_out: str,
    hubs: Sequence[str],
    max_hops: int = MAX_HOPS_CAP,
) -> list[tuple[str, ...]]:
    """Enumerate paths from token_in to token_out with at most max_hops hops.

    Args:
        token_in: Normalized input token address
        token_out: Normalized output token address
        hubs: Normalized hub addresses in preference order
        max_hops: Maximum number of hops (clamped to MAX_HOPS_CAP)

    Returns:
        Paths as address tuples; no path repeats an address
    """
    if token_in == token_out or max_hops < 1:
        return []
    max_hops = min(max_hops, MAX_HOPS_CAP)

    paths: list[tuple[str, ...]] = [(token_in, token_out)]
    intermediates = unique_hubs(hubs, exclude=(token_in, token_out))

    if max_hops >= 2:
        paths.extend((token_in, hub, token_out) for hub in intermediates)

    if max_hops >= 3:
        for first in intermediates:
            for second in intermediates:
                if first != second:
                    paths.append((token_in, first, second, token_out))

    return paths


__all__ = ["candidate_paths", "unique_hubs"]
