"""Reconciliation helpers that diff a storefront catalog against a supplier feed."""

from __future__ import annotations

import logging
from collections import defaultdict
from collections.abc import Iterable, Mapping
from dataclasses import asdict, dataclass, field
from typing import Any, TypeAlias, TypeVar

from .config import TransformConfig
from .dump import DumpSink, NullDumpSink
from .events import NULL_RECORDER, EventRecorder
from .models import (
    STOCK_INSTOCK,
    STOCK_OUTOFSTOCK,
    AttributeRecord,
    BatchPayload,
    CreateRecord,
    DuplicateSkuInfo,
    ImageRef,
    NewItemsPayload,
    StoreProduct,
    SupplierOffer,
    UpdatePayload,
    UpdateRecord,
)
from .normalize import coerce_product_id, collapse_whitespace, format_price, round_price
from .transform import normalize_offers

RecordT = TypeVar("RecordT")
SkuIndex: TypeAlias = dict[str, RecordT]

NEW_ITEMS_DUMP = "create-new-products-payload.json"
OUTOFSTOCK_DUMP = "outofstock-products-payload.json"
OUTDATED_DUMP = "outdated-products-payload.json"
BATCH_DUMP = "batch-update-payload.json"
NORMALIZED_DUMP = "supplier-offers-normalized.json"


def _sku_of(record: object, sku_field: str) -> str:
    value = record.get(sku_field, "") if isinstance(record, Mapping) else getattr(record, sku_field, "")
    return value if isinstance(value, str) else ""


def index_by_sku(records: Iterable[RecordT], sku_field: str = "sku") -> SkuIndex[RecordT]:
    """Map each non-empty SKU to the last record carrying it.

    Records with an empty SKU are left out. Use `detect_duplicate_skus` to see
    which SKUs were collapsed.
    """

    index: SkuIndex[RecordT] = {}
    for record in records:
        sku = _sku_of(record, sku_field)
        if sku == "":
            continue
        index[sku] = record
    return index


def detect_duplicate_skus(records: Iterable[object], sku_field: str = "sku") -> list[DuplicateSkuInfo]:
    """Return SKUs shared by more than one record, sorted by SKU."""

    counts: defaultdict[str, int] = defaultdict(int)
    for record in records:
        sku = _sku_of(record, sku_field)
        if sku:
            counts[sku] += 1

    return [{"sku": sku, "record_count": counts[sku]} for sku in sorted(counts) if counts[sku] > 1]


def map_offer_to_create(offer: SupplierOffer, category_id: int) -> CreateRecord:
    """Map a normalized supplier offer to the storefront create shape."""

    images: list[ImageRef] = [{"src": picture.strip()} for picture in offer.pictures if picture.strip()]

    attributes: list[AttributeRecord] = []
    for param in offer.params:
        name = param.name.strip()
        value = param.value.strip()
        if name == "" or value == "":
            continue
        attributes.append({"name": name, "options": [value], "visible": True, "variation": False})

    record: CreateRecord = {
        "name": offer.name,
        "type": "simple",
        "regular_price": format_price(offer.price),
        "description": offer.description,
    }
    if offer.sku:
        record["sku"] = offer.sku
    record["categories"] = [{"id": category_id}]
    if images:
        record["images"] = images
    if attributes:
        record["attributes"] = attributes
    return record


def find_new_items(
    offers: list[SupplierOffer],
    store_products: list[StoreProduct],
    *,
    category_id: int,
    recorder: EventRecorder = NULL_RECORDER,
) -> NewItemsPayload:
    """Build create records for supplier SKUs missing from the storefront."""

    store_index = index_by_sku(store_products)
    create: list[CreateRecord] = []
    for offer in offers:
        if offer.sku == "" or offer.sku in store_index:
            continue
        recorder.record(logging.INFO, "new_item_found", sku=offer.sku)
        create.append(map_offer_to_create(offer, category_id))
    return {"create": create}


def find_out_of_stock_items(
    store_products: list[StoreProduct],
    offers: list[SupplierOffer],
    *,
    recorder: EventRecorder = NULL_RECORDER,
) -> UpdatePayload:
    """Mark storefront products whose SKU disappeared from the supplier feed."""

    offer_index = index_by_sku(offers)
    update: list[UpdateRecord] = []
    for product in store_products:
        if product.id <= 0 or product.sku == "":
            continue
        if product.stock_status.lower() == STOCK_OUTOFSTOCK:
            continue
        if product.sku in offer_index:
            continue
        recorder.record(logging.INFO, "outofstock_item_found", sku=product.sku, id=product.id)
        update.append({"id": product.id, "stock_status": STOCK_OUTOFSTOCK})
    return {"update": update}


def build_outdated_update(product: StoreProduct, offer: SupplierOffer) -> UpdateRecord | None:
    """Compare one matched pair and return the fields that need updating.

    Stock status is only ever promoted to in stock here; demotion is handled by
    `find_out_of_stock_items`.
    """

    if product.id <= 0 or product.sku == "":
        return None

    update: UpdateRecord = {"id": product.id}

    supplier_name = collapse_whitespace(offer.name)
    if supplier_name != "" and supplier_name != collapse_whitespace(product.name):
        update["name"] = supplier_name

    supplier_price = round_price(offer.price)
    if round_price(product.regular_price) != supplier_price:
        update["regular_price"] = format_price(supplier_price)

    if offer.available is True and product.stock_status.lower() == STOCK_OUTOFSTOCK:
        update["stock_status"] = STOCK_INSTOCK

    if len(update) == 1:
        return None
    return update


def find_outdated_items(
    store_products: list[StoreProduct],
    offers: list[SupplierOffer],
    *,
    recorder: EventRecorder = NULL_RECORDER,
) -> UpdatePayload:
    """Build field-level updates for SKUs present in both catalogs."""

    store_index = index_by_sku(store_products)
    offer_index = index_by_sku(offers)

    update: list[UpdateRecord] = []
    for sku, product in store_index.items():
        offer = offer_index.get(sku)
        if offer is None:
            continue
        record = build_outdated_update(product, offer)
        if record is None:
            continue
        recorder.record(
            logging.INFO,
            "outdated_item_found",
            sku=sku,
            id=product.id,
            changed_fields=[key for key in record if key != "id"],
        )
        update.append(record)
    return {"update": update}


def merge_update_records(first: Mapping[str, Any], second: Mapping[str, Any]) -> UpdateRecord:
    """Merge two updates for the same id; fields from `second` win."""

    merged: dict[str, Any] = dict(first)
    merged.update(second)
    first_id, _ = coerce_product_id(first.get("id"))
    second_id, _ = coerce_product_id(second.get("id"))
    merged["id"] = second_id or first_id
    return merged  # type: ignore[return-value]


def _valid_entries(payload: Mapping[str, Any] | None, key: str) -> list[Mapping[str, Any]]:
    if not isinstance(payload, Mapping):
        return []
    entries = payload.get(key)
    if not isinstance(entries, list):
        return []
    return [entry for entry in entries if isinstance(entry, Mapping)]


def merge_batch_payloads(
    new_items: Mapping[str, Any] | None,
    out_of_stock: Mapping[str, Any] | None,
    outdated: Mapping[str, Any] | None,
    *,
    recorder: EventRecorder = NULL_RECORDER,
) -> BatchPayload:
    """Combine the three detector payloads into one batch.

    Updates are grouped by id in first-appearance order. When both sources
    address the same id, outdated-item fields override out-of-stock fields,
    whatever order the detectors ran in. Ids that are not positive are dropped.
    """

    create: list[CreateRecord] = [dict(entry) for entry in _valid_entries(new_items, "create")]  # type: ignore[misc]

    update_by_id: dict[int, UpdateRecord] = {}
    for entry in [*_valid_entries(out_of_stock, "update"), *_valid_entries(outdated, "update")]:
        entry_id, _ = coerce_product_id(entry.get("id"))
        if entry_id <= 0:
            continue
        existing = update_by_id.get(entry_id)
        if existing is None:
            update_by_id[entry_id] = merge_update_records({}, entry)
        else:
            update_by_id[entry_id] = merge_update_records(existing, entry)

    payload: BatchPayload = {"create": create, "update": list(update_by_id.values())}
    recorder.record(
        logging.INFO,
        "batch_merged",
        create_count=len(payload["create"]),
        update_count=len(payload["update"]),
    )
    return payload


@dataclass(slots=True)
class SyncResult:
    """Everything one reconciliation pass produced."""

    normalized_offers: list[SupplierOffer]
    new_items: NewItemsPayload
    out_of_stock: UpdatePayload
    outdated: UpdatePayload
    batch: BatchPayload
    duplicate_skus: dict[str, list[DuplicateSkuInfo]] = field(default_factory=dict)


def reconcile_catalogs(
    store_products: list[StoreProduct],
    supplier_offers: list[SupplierOffer],
    *,
    config: TransformConfig,
    category_id: int,
    recorder: EventRecorder = NULL_RECORDER,
    dump_sink: DumpSink | None = None,
) -> SyncResult:
    """Run normalization, the three detectors and the batch merge."""

    sink = dump_sink or NullDumpSink()

    normalized = normalize_offers(supplier_offers, config, recorder=recorder)
    sink.dump([asdict(offer) for offer in normalized], NORMALIZED_DUMP)

    duplicate_skus = {
        "storefront": detect_duplicate_skus(store_products),
        "supplier": detect_duplicate_skus(normalized),
    }
    for catalog, duplicates in duplicate_skus.items():
        for duplicate in duplicates:
            recorder.record(logging.WARNING, "duplicate_sku_collapsed", catalog=catalog, **duplicate)

    new_items = find_new_items(normalized, store_products, category_id=category_id, recorder=recorder)
    sink.dump(new_items, NEW_ITEMS_DUMP)

    out_of_stock = find_out_of_stock_items(store_products, normalized, recorder=recorder)
    sink.dump(out_of_stock, OUTOFSTOCK_DUMP)

    outdated = find_outdated_items(store_products, normalized, recorder=recorder)
    sink.dump(outdated, OUTDATED_DUMP)

    batch = merge_batch_payloads(new_items, out_of_stock, outdated, recorder=recorder)
    sink.dump(batch, BATCH_DUMP)

    return SyncResult(
        normalized_offers=normalized,
        new_items=new_items,
        out_of_stock=out_of_stock,
        outdated=outdated,
        batch=batch,
        duplicate_skus=duplicate_skus,
    )
