"""Unit tests for supplier offer filtering and markup."""

from __future__ import annotations

import logging
import math

import pytest

from catalog_sync.config import PriceRange, TransformConfig
from catalog_sync.models import SupplierOffer
from catalog_sync.transform import is_offer_eligible, normalize_offers


def _offer(sku: str, *, price: float, available: bool = True, name: str = "Mixer") -> SupplierOffer:
    """Build a minimal supplier offer for targeted filter tests."""
    return SupplierOffer(sku=sku, name=name, price=price, available=available)


class _ListRecorder:
    def __init__(self) -> None:
        self.events: list[tuple[int, str, dict[str, object]]] = []

    def record(self, level: int, event: str, **context: object) -> None:
        self.events.append((level, event, context))


SCENARIO_CONFIG = TransformConfig(
    markup=300.0,
    price_range=PriceRange(min=1.0, max=1000.0),
    exclude_skus=frozenset({"X1"}),
)


def test_normalize_offers_applies_filters_then_markup() -> None:
    """Exclusion, price range and availability filters drop offers before markup."""
    offers = [
        _offer("X1", price=50),
        _offer("X2", price=2000),
        _offer("X3", price=100),
        _offer("X4", price=100, available=False),
    ]

    result = normalize_offers(offers, SCENARIO_CONFIG)

    assert result == [_offer("X3", price=400.0)]


def test_normalize_offers_does_not_mutate_input() -> None:
    """The input list and its offers should be left untouched."""
    offers = [_offer("A", price=10), _offer("B", price=20)]
    snapshot = list(offers)

    normalize_offers(offers, TransformConfig(markup=5.0))

    assert offers == snapshot
    assert offers[0].price == 10


def test_normalize_offers_is_deterministic_and_stable_without_markup() -> None:
    """Re-running gives the same output; with zero markup it is idempotent."""
    offers = [_offer("A", price=10), _offer("B", price=0.5), _offer("C", price=5, available=False)]
    config = TransformConfig(markup=0.0, price_range=PriceRange(min=1.0, max=100.0))

    once = normalize_offers(offers, config)

    assert normalize_offers(offers, config) == once
    assert normalize_offers(once, config) == once
    assert [offer.sku for offer in once] == ["A"]


def test_price_range_is_inclusive_and_rejects_non_finite_prices() -> None:
    """Prices on the bounds survive; NaN and infinity never do."""
    config = TransformConfig(price_range=PriceRange(min=1.0, max=1000.0))

    assert is_offer_eligible(_offer("A", price=1.0), config)
    assert is_offer_eligible(_offer("B", price=1000.0), config)
    assert not is_offer_eligible(_offer("C", price=0.99), config)
    assert not is_offer_eligible(_offer("D", price=math.nan), config)
    assert not is_offer_eligible(_offer("E", price=math.inf), TransformConfig())


def test_exclusion_only_matches_non_empty_skus() -> None:
    """Offers without a SKU are not caught by the exclusion list."""
    config = TransformConfig(exclude_skus=frozenset({"", "V1"}))

    result = normalize_offers([_offer("", price=10), _offer("V1", price=10), _offer("V2", price=10)], config)

    assert [offer.sku for offer in result] == ["", "V2"]


def test_normalize_offers_preserves_input_order_and_other_fields() -> None:
    """Survivors keep input order and all fields except price."""
    first = SupplierOffer(sku="B", name="Second", price=2.0, available=True, pictures=("https://x/1.jpg",))
    second = SupplierOffer(sku="A", name="First", price=1.0, available=True, description="desc")

    result = normalize_offers([first, second], TransformConfig(markup=1.5))

    assert [offer.sku for offer in result] == ["B", "A"]
    assert result[0].pictures == ("https://x/1.jpg",)
    assert result[1].description == "desc"
    assert result[1].price == 2.5


def test_normalize_offers_reports_counts_to_recorder() -> None:
    """A summary event should be recorded with input and output totals."""
    recorder = _ListRecorder()

    normalize_offers([_offer("A", price=10), _offer("B", price=10, available=False)], TransformConfig(), recorder=recorder)

    assert recorder.events == [
        (logging.INFO, "offers_normalized", {"input_total": 2, "output_total": 1, "markup": 0.0}),
    ]


def test_transform_config_rejects_invalid_values() -> None:
    """Negative markup and inverted ranges should fail fast."""
    with pytest.raises(ValueError, match="Markup"):
        TransformConfig(markup=-1.0)
    with pytest.raises(ValueError, match="greater than max"):
        PriceRange(min=10.0, max=1.0)
