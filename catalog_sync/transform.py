"""Business filters and markup applied to supplier offers."""

from __future__ import annotations

import logging
from dataclasses import replace

from .config import TransformConfig
from .events import NULL_RECORDER, EventRecorder
from .models import SupplierOffer


def is_offer_eligible(offer: SupplierOffer, config: TransformConfig) -> bool:
    """Return whether an offer survives the availability, price and exclusion filters."""

    if offer.available is not True:
        return False
    if not config.price_range.contains(offer.price):
        return False
    if offer.sku != "" and offer.sku in config.exclude_skus:
        return False
    return True


def normalize_offers(
    offers: list[SupplierOffer],
    config: TransformConfig,
    *,
    recorder: EventRecorder = NULL_RECORDER,
) -> list[SupplierOffer]:
    """Filter offers and add the additive markup to each surviving price.

    Filters run in order: availability, inclusive price range, SKU exclusion.
    Survivors keep their input order; the input offers are never mutated.
    """

    result: list[SupplierOffer] = []
    for offer in offers:
        if not is_offer_eligible(offer, config):
            continue
        result.append(replace(offer, price=offer.price + config.markup))

    recorder.record(
        logging.INFO,
        "offers_normalized",
        input_total=len(offers),
        output_total=len(result),
        markup=config.markup,
    )
    return result
