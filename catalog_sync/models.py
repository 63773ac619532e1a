"""Core typed models shared by feed decoding and reconciliation modules."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Literal, TypedDict

STOCK_INSTOCK = "instock"
STOCK_OUTOFSTOCK = "outofstock"


@dataclass(frozen=True, slots=True)
class DataIssue:
    """Structured data-quality issue emitted while decoding a catalog document."""

    code: str
    message: str
    field: str | None = None
    record: str | None = None


@dataclass(frozen=True, slots=True)
class StoreProduct:
    """One product as currently listed in the storefront catalog."""

    id: int = 0
    sku: str = ""
    name: str = ""
    regular_price: str = ""
    stock_status: str = ""


@dataclass(frozen=True, slots=True)
class OfferParam:
    """Named attribute pair attached to a supplier offer."""

    name: str
    value: str


@dataclass(frozen=True, slots=True)
class SupplierOffer:
    """One offer from the supplier feed.

    The Normalizer returns offers of the same shape with a marked-up price.
    """

    sku: str = ""
    name: str = ""
    price: float = 0.0
    available: bool = False
    description: str = ""
    pictures: tuple[str, ...] = ()
    params: tuple[OfferParam, ...] = ()


class CategoryRef(TypedDict):
    id: int


class ImageRef(TypedDict):
    src: str


class AttributeRecord(TypedDict):
    """Storefront attribute object with a single option value."""

    name: str
    options: list[str]
    visible: bool
    variation: bool


class _CreateRecordBase(TypedDict):
    name: str
    type: Literal["simple"]
    regular_price: str
    description: str


class CreateRecord(_CreateRecordBase, total=False):
    """Storefront "create" record built from a normalized supplier offer."""

    sku: str
    categories: list[CategoryRef]
    images: list[ImageRef]
    attributes: list[AttributeRecord]


class _UpdateRecordBase(TypedDict):
    id: int


class UpdateRecord(_UpdateRecordBase, total=False):
    """Field-level storefront update addressed by product id."""

    stock_status: str
    name: str
    regular_price: str


class NewItemsPayload(TypedDict):
    create: list[CreateRecord]


class UpdatePayload(TypedDict):
    update: list[UpdateRecord]


class BatchPayload(TypedDict):
    """Combined create/update instruction set for the storefront write API."""

    create: list[CreateRecord]
    update: list[UpdateRecord]


class DuplicateSkuInfo(TypedDict):
    """SKU that appeared in more than one record and was collapsed by indexing."""

    sku: str
    record_count: int


@dataclass(slots=True)
class StorefrontParseResult:
    """Decoded storefront products for one document."""

    source: Path | None
    products: list[StoreProduct]
    issues: list[DataIssue] = field(default_factory=list)

    @property
    def total_records(self) -> int:
        """Return the number of decoded products."""

        return len(self.products)


@dataclass(slots=True)
class SupplierParseResult:
    """Decoded supplier offers for one feed document."""

    source: Path | None
    offers: list[SupplierOffer]
    issues: list[DataIssue] = field(default_factory=list)

    @property
    def total_records(self) -> int:
        """Return the number of decoded offers."""

        return len(self.offers)


@dataclass(slots=True)
class CombinedParseResult:
    """Container for both decoded catalogs."""

    storefront: StorefrontParseResult
    supplier: SupplierParseResult

    def all_issues(self) -> list[DataIssue]:
        """Return a flat list of issues from both documents."""

        return [*self.storefront.issues, *self.supplier.issues]
