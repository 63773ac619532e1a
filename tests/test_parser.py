from __future__ import annotations

"""Feed decoding tests for the supplier XML feed and storefront export.

These tests target document-structure checks and per-field defaults that are
easy to break when modifying the decoders.
"""

import json
from pathlib import Path

import pytest

from catalog_sync.models import OfferParam
from catalog_sync.parser import (
    parse_both_catalogs,
    parse_store_products,
    parse_store_products_file,
    parse_supplier_feed,
    parse_supplier_feed_file,
)

PROJECT_ROOT = Path(__file__).resolve().parents[1]
SUPPLIER_FEED = PROJECT_ROOT / "data" / "supplier_feed.xml"
STORE_PRODUCTS = PROJECT_ROOT / "data" / "store_products.json"


def _issue_codes(issues: list[object]) -> set[str]:
    return {issue.code for issue in issues}


def _feed(offers_xml: str) -> str:
    return f"<yml_catalog><shop><offers>{offers_xml}</offers></shop></yml_catalog>"


def test_parse_supplier_feed_decodes_offer_fields() -> None:
    """Offer attributes and child elements should map onto `SupplierOffer`."""
    result = parse_supplier_feed(
        _feed(
            '<offer id="7" available="true">'
            "<price>1 250,50</price><name> Basin Mixer </name><kod>V7</kod>"
            "<description><![CDATA[<b>Brass</b>]]></description>"
            "<picture>https://x/1.jpg</picture><picture>  </picture>"
            '<param name="Color">Chrome</param><param name="">skip</param><param name="Note"></param>'
            "</offer>"
        )
    )

    assert result.total_records == 1
    offer = result.offers[0]
    assert offer.sku == "V7"
    assert offer.name == "Basin Mixer"
    assert offer.price == 1250.5
    assert offer.available is True
    assert offer.description == "<b>Brass</b>"
    assert offer.pictures == ("https://x/1.jpg",)
    assert offer.params == (OfferParam("Color", "Chrome"), OfferParam("Note", ""))
    assert result.issues == []


def test_parse_supplier_feed_defaults_missing_fields() -> None:
    """Missing availability, price and SKU default to safe zero-values with issues."""
    result = parse_supplier_feed(_feed('<offer id="9"><name>Bare</name></offer>'))

    offer = result.offers[0]
    assert offer.available is False
    assert offer.price == 0.0
    assert offer.sku == ""
    assert offer.pictures == ()
    assert _issue_codes(result.issues) == {"missing_sku", "missing_value"}
    assert {issue.record for issue in result.issues} == {"9"}


def test_parse_supplier_feed_rejects_malformed_xml() -> None:
    """Broken XML should fail fast with a clear error."""
    with pytest.raises(ValueError, match="Failed to parse XML"):
        parse_supplier_feed("<yml_catalog><shop>")


def test_parse_supplier_feed_rejects_unexpected_structure() -> None:
    """Documents without the catalog structure should raise instead of guessing."""
    with pytest.raises(ValueError, match="XML structure does not match"):
        parse_supplier_feed("<catalog><offers><offer/></offers></catalog>")
    with pytest.raises(ValueError, match="XML structure does not match"):
        parse_supplier_feed("<yml_catalog><shop/></yml_catalog>")


def test_parse_store_products_decodes_and_flags_entries() -> None:
    """Storefront objects become `StoreProduct`s; bad entries are flagged."""
    result = parse_store_products(
        [
            {"id": 11, "sku": "V1", "name": " Mixer ", "regular_price": 400.0, "stock_status": "instock"},
            {"id": "12", "sku": None, "name": "No SKU", "regular_price": "", "stock_status": "outofstock"},
            "not an object",
            {"id": -1, "sku": "V3"},
        ]
    )

    assert result.total_records == 3
    first, second, third = result.products
    assert (first.id, first.sku, first.name, first.regular_price) == (11, "V1", "Mixer", "400")
    assert (second.id, second.sku, second.regular_price) == (12, "", "")
    assert (third.id, third.sku, third.stock_status) == (0, "V3", "")
    assert _issue_codes(result.issues) == {"missing_sku", "non_object_entry_skipped", "invalid_id", "missing_value"}


def test_parse_store_products_requires_a_list() -> None:
    """A non-list export should be rejected."""
    with pytest.raises(ValueError, match="must be a JSON list"):
        parse_store_products({"products": []})


def test_parse_store_products_file_rejects_invalid_json(tmp_path: Path) -> None:
    """Unreadable JSON should surface as a `ValueError` naming the file."""
    path = tmp_path / "products.json"
    path.write_text("[{", encoding="utf-8")

    with pytest.raises(ValueError, match="not valid JSON"):
        parse_store_products_file(path)


def test_parse_sample_supplier_feed() -> None:
    """The bundled sample feed should decode all six offers."""
    result = parse_supplier_feed_file(SUPPLIER_FEED)

    assert result.source == SUPPLIER_FEED
    assert [offer.sku for offer in result.offers] == ["V1001", "V1002", "V1003", "V1004", "V1005", ""]
    assert result.offers[1].price == 250.5
    assert result.offers[2].available is False
    assert _issue_codes(result.issues) == {"missing_sku"}


def test_parse_both_catalogs_returns_combined_result() -> None:
    """Combined decoding should include both documents and their issues."""
    combined = parse_both_catalogs(STORE_PRODUCTS, SUPPLIER_FEED)

    assert combined.storefront.total_records == len(json.loads(STORE_PRODUCTS.read_text(encoding="utf-8")))
    assert combined.supplier.total_records == 6
    assert len(combined.all_issues()) == len(combined.storefront.issues) + len(combined.supplier.issues)
