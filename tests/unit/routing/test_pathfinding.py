"""Tests for candidate path enumeration."""

from dexroute.routing.pathfinding import candidate_paths, unique_hubs
from tests.helpers import DAI, TKA, TKB, USDC, USDT, WETH

HUBS = [WETH, USDC, USDT, DAI]


class TestCandidatePaths:
    def test_enumeration_order(self):
        """Direct first, then 2-hop in hub order, then 3-hop hub pairs."""
        paths = candidate_paths(TKA, TKB, [WETH, USDC], max_hops=3)
        assert paths == [
            (TKA, TKB),
            (TKA, WETH, TKB),
            (TKA, USDC, TKB),
            (TKA, WETH, USDC, TKB),
            (TKA, USDC, WETH, TKB),
        ]

    def test_candidate_count(self):
        # 1 direct + 4 two-hop + 4*3 three-hop
        assert len(candidate_paths(TKA, TKB, HUBS, max_hops=3)) == 17

    def test_endpoints_excluded_from_hubs(self):
        paths = candidate_paths(WETH, USDC, HUBS, max_hops=3)

        assert len(paths) == 1 + 2 + 2
        for path in paths:
            assert len(set(path)) == len(path)
            assert path[0] == WETH and path[-1] == USDC

    def test_max_hops_bound(self):
        assert candidate_paths(TKA, TKB, HUBS, max_hops=1) == [(TKA, TKB)]
        assert len(candidate_paths(TKA, TKB, HUBS, max_hops=2)) == 5

    def test_max_hops_clamped(self):
        assert candidate_paths(TKA, TKB, HUBS, max_hops=7) == candidate_paths(
            TKA, TKB, HUBS, max_hops=3
        )

    def test_degenerate_inputs(self):
        assert candidate_paths(TKA, TKA, HUBS) == []
        assert candidate_paths(TKA, TKB, HUBS, max_hops=0) == []

    def test_no_hubs(self):
        assert candidate_paths(TKA, TKB, [], max_hops=3) == [(TKA, TKB)]

    def test_deterministic(self):
        assert candidate_paths(TKA, TKB, HUBS) == candidate_paths(TKA, TKB, HUBS)


class TestUniqueHubs:
    def test_preserves_order_and_dedupes(self):
        assert unique_hubs([USDC, WETH, USDC, DAI]) == [USDC, WETH, DAI]

    def test_exclusion(self):
        assert unique_hubs(HUBS, exclude=[WETH, DAI]) == [USDC, USDT]
