"""Decoders for the supplier XML feed and the storefront product export."""

from __future__ import annotations

import json
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Any

from .models import (
    CombinedParseResult,
    DataIssue,
    OfferParam,
    StorefrontParseResult,
    StoreProduct,
    SupplierOffer,
    SupplierParseResult,
)
from .normalize import (
    coerce_product_id,
    coerce_sku,
    coerce_text,
    format_price,
    parse_boolean_string,
    parse_decimal_string,
)

FEED_STRUCTURE = "yml_catalog -> shop -> offers -> offer"


def _child_text(node: ET.Element, tag: str) -> str:
    """Return the stripped text of the first child with `tag`, or `""`."""

    child = node.find(tag)
    if child is None or child.text is None:
        return ""
    return child.text.strip()


def _tag_issues(issues: list[DataIssue], record: str) -> list[DataIssue]:
    return [DataIssue(code=issue.code, message=issue.message, field=issue.field, record=record) for issue in issues]


def _offer_from_element(offer: ET.Element, position: int) -> tuple[SupplierOffer, list[DataIssue]]:
    """Convert one `<offer>` element into a `SupplierOffer` with issue metadata."""

    issues: list[DataIssue] = []

    sku, sku_issues = coerce_sku(_child_text(offer, "kod"))
    price, price_issues = parse_decimal_string(_child_text(offer, "price"))
    issues.extend(sku_issues)
    issues.extend(price_issues)

    pictures = tuple(
        picture.text.strip() for picture in offer.findall("picture") if picture.text and picture.text.strip()
    )

    params: list[OfferParam] = []
    for param in offer.findall("param"):
        name = (param.get("name") or "").strip()
        if name == "":
            continue
        params.append(OfferParam(name=name, value=(param.text or "").strip()))

    record_ref = sku or offer.get("id") or f"offer #{position}"
    decoded = SupplierOffer(
        sku=sku,
        name=_child_text(offer, "name"),
        price=price,
        available=parse_boolean_string(offer.get("available")),
        description=_child_text(offer, "description"),
        pictures=pictures,
        params=tuple(params),
    )
    return decoded, _tag_issues(issues, record_ref)


def parse_supplier_feed(xml_body: str | bytes, *, source: Path | None = None) -> SupplierParseResult:
    """Parse a YML supplier catalog into offers.

    Raises `ValueError` when the body is not XML or lacks the expected
    `yml_catalog -> shop -> offers` structure.
    """

    try:
        root = ET.fromstring(xml_body)
    except ET.ParseError as exc:
        raise ValueError(f"Failed to parse XML: {exc}") from exc

    offers_node = root.find("shop/offers") if root.tag == "yml_catalog" else None
    if offers_node is None:
        raise ValueError(f"XML structure does not match expected format: {FEED_STRUCTURE} (root <{root.tag}>)")

    offers: list[SupplierOffer] = []
    issues: list[DataIssue] = []
    for position, element in enumerate(offers_node.findall("offer"), start=1):
        offer, offer_issues = _offer_from_element(element, position)
        offers.append(offer)
        issues.extend(offer_issues)

    return SupplierParseResult(source=source, offers=offers, issues=issues)


def parse_supplier_feed_file(path: str | Path) -> SupplierParseResult:
    """Read and parse a supplier feed from disk."""

    feed_path = Path(path)
    return parse_supplier_feed(feed_path.read_bytes(), source=feed_path)


def _regular_price(value: Any) -> tuple[str, list[DataIssue]]:
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return format_price(float(value)), []
    if value is None:
        return "", []
    return coerce_text(value, field="regular_price")


def _product_from_item(item: dict[str, Any], position: int) -> tuple[StoreProduct, list[DataIssue]]:
    """Convert one storefront JSON object into a `StoreProduct`."""

    issues: list[DataIssue] = []

    product_id, id_issues = coerce_product_id(item.get("id"))
    sku, sku_issues = coerce_sku(item.get("sku"))
    name, name_issues = coerce_text(item.get("name"), field="name")
    regular_price, price_issues = _regular_price(item.get("regular_price"))
    stock_status, status_issues = coerce_text(item.get("stock_status"), field="stock_status")

    issues.extend(id_issues)
    issues.extend(sku_issues)
    issues.extend(name_issues)
    issues.extend(price_issues)
    issues.extend(status_issues)

    record_ref = str(product_id) if product_id else f"product #{position}"
    product = StoreProduct(
        id=product_id,
        sku=sku,
        name=name,
        regular_price=regular_price,
        stock_status=stock_status,
    )
    return product, _tag_issues(issues, record_ref)


def parse_store_products(items: Any, *, source: Path | None = None) -> StorefrontParseResult:
    """Decode a storefront product list that was already loaded from JSON."""

    if not isinstance(items, list):
        raise ValueError(f"Storefront export must be a JSON list, got {type(items).__name__}")

    products: list[StoreProduct] = []
    issues: list[DataIssue] = []
    for position, item in enumerate(items, start=1):
        if not isinstance(item, dict):
            issues.append(
                DataIssue(
                    code="non_object_entry_skipped",
                    message=f"Entry {position} is not an object and was skipped",
                    record=f"product #{position}",
                )
            )
            continue
        product, product_issues = _product_from_item(item, position)
        products.append(product)
        issues.extend(product_issues)

    return StorefrontParseResult(source=source, products=products, issues=issues)


def parse_store_products_file(path: str | Path) -> StorefrontParseResult:
    """Read and decode a storefront JSON export from disk."""

    export_path = Path(path)
    try:
        items = json.loads(export_path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ValueError(f"Storefront export is not valid JSON: {export_path}: {exc}") from exc
    return parse_store_products(items, source=export_path)


def parse_both_catalogs(store_products_path: str | Path, supplier_feed_path: str | Path) -> CombinedParseResult:
    """Decode both catalogs and return them as one combined structure."""

    return CombinedParseResult(
        storefront=parse_store_products_file(store_products_path),
        supplier=parse_supplier_feed_file(supplier_feed_path),
    )
