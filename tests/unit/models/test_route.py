"""Tests for Route invariants and price impact severity."""

from decimal import Decimal

import pytest

from dexroute.errors import InvalidPath
from dexroute.models.assets import Erc20Asset
from dexroute.models.route import PriceImpactSeverity, Route, RouteResult
from tests.helpers import DAI, USDC, WETH

USDC_ASSET = Erc20Asset(address=USDC, symbol="USDC", decimals=6)
WETH_ASSET = Erc20Asset(address=WETH, symbol="WETH")
DAI_ASSET = Erc20Asset(address=DAI, symbol="DAI")

POOL_1 = "0x" + "aa" * 20
POOL_2 = "0x" + "bb" * 20


def make_route(**overrides):
    fields = {
        "path": (USDC_ASSET, WETH_ASSET, DAI_ASSET),
        "addresses": (USDC, WETH, DAI),
        "pairs": (POOL_1, POOL_2),
        "amounts": (1_000_000, 499, 990_000),
        "price_impact": Decimal("0.61"),
    }
    fields.update(overrides)
    return Route(**fields)


class TestRoute:
    """Tests for Route construction and accessors."""

    def test_accessors(self):
        route = make_route()
        assert route.token_in == USDC_ASSET
        assert route.token_out == DAI_ASSET
        assert route.amount_in == 1_000_000
        assert route.amount_out == 990_000
        assert route.hop_count == 2
        assert route.is_multihop

    def test_single_asset_raises(self):
        with pytest.raises(InvalidPath):
            make_route(path=(USDC_ASSET,), addresses=(USDC,), pairs=(), amounts=(1,))

    def test_duplicate_asset_raises(self):
        with pytest.raises(InvalidPath, match="same asset"):
            make_route(
                path=(USDC_ASSET, WETH_ASSET, USDC_ASSET),
                addresses=(USDC, WETH, USDC),
            )

    def test_pairs_length_mismatch_raises(self):
        with pytest.raises(InvalidPath, match="pools"):
            make_route(pairs=(POOL_1,))

    def test_amounts_length_mismatch_raises(self):
        with pytest.raises(InvalidPath, match="amounts"):
            make_route(amounts=(1, 2))

    def test_addresses_length_mismatch_raises(self):
        with pytest.raises(InvalidPath):
            make_route(addresses=(USDC, DAI))

    def test_equality_ignores_hop_details(self):
        assert make_route() == make_route(hops=())


class TestPriceImpactSeverity:
    @pytest.mark.parametrize(
        "impact,expected",
        [
            (Decimal("0"), PriceImpactSeverity.NONE),
            (Decimal("1.99"), PriceImpactSeverity.NONE),
            (Decimal("2"), PriceImpactSeverity.MODERATE),
            (Decimal("4.99"), PriceImpactSeverity.MODERATE),
            (Decimal("5"), PriceImpactSeverity.HIGH),
            (Decimal("33.46"), PriceImpactSeverity.HIGH),
        ],
    )
    def test_thresholds(self, impact, expected):
        assert PriceImpactSeverity.from_percent(impact) is expected

    def test_route_severity(self):
        assert make_route(price_impact=Decimal("6")).severity is PriceImpactSeverity.HIGH


class TestRouteResult:
    def test_not_found(self):
        result = RouteResult(best_route=None)
        assert not result.found
        assert result.all_routes == ()

    def test_found(self):
        route = make_route()
        assert RouteResult(best_route=route, all_routes=(route,)).found
