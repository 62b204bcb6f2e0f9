"""schema.org JSON-LD normalization.

One normalizer per recognised ``@type``; anything else with a non-empty
``@type`` passes through as :class:`~tripleparser.items.OtherData`.  Objects
without ``@type`` are dropped.  Normalizers never raise on partial input:
missing fields stay ``None``.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from typing import Any

from pydantic import ValidationError

from tripleparser.items import (
    BreadcrumbItem,
    BreadcrumbListData,
    Contacts,
    EAVTriple,
    OrganizationData,
    OtherData,
    ProductData,
    StructuredDataItem,
    WebPageData,
)

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _text(val: Any) -> str | None:
    """Coerce a JSON-LD scalar-ish value to a string, or None."""
    if val is None or isinstance(val, bool):
        return None
    if isinstance(val, (int, float)):
        return str(val)
    if isinstance(val, str):
        return val.strip() or None
    if isinstance(val, list):
        return _text(val[0]) if val else None
    if isinstance(val, dict):
        return _text(val.get("name") or val.get("@value") or val.get("@id"))
    return None


def _as_list(val: Any) -> list[Any]:
    if val is None:
        return []
    if isinstance(val, list):
        return val
    return [val]


def _position(val: Any) -> int | None:
    if isinstance(val, bool):
        return None
    if isinstance(val, int):
        return val
    try:
        return int(str(val).strip())
    except (TypeError, ValueError):
        return None


# ---------------------------------------------------------------------------
# Per-type normalizers
# ---------------------------------------------------------------------------

def normalize_product(obj: dict[str, Any]) -> ProductData:
    price: str | None = None
    currency: str | None = None
    availability: str | None = None

    for offer in _as_list(obj.get("offers")):
        if not isinstance(offer, dict):
            continue
        specs = [s for s in _as_list(offer.get("priceSpecification")) if isinstance(s, dict)]
        if specs:
            spec_price = _text(specs[0].get("price"))
            spec_currency = _text(specs[0].get("priceCurrency"))
        else:
            spec_price = _text(offer.get("price"))
            spec_currency = _text(offer.get("priceCurrency"))
        price = spec_price or price
        currency = spec_currency or currency
        availability = _text(offer.get("availability")) or availability

    return ProductData(
        name=_text(obj.get("name")),
        description=_text(obj.get("description")),
        price=price,
        currency=currency,
        availability=availability,
    )


def normalize_organization(obj: dict[str, Any]) -> OrganizationData:
    contact_points = [c for c in _as_list(obj.get("contactPoint")) if isinstance(c, dict)]
    first_contact = contact_points[0] if contact_points else {}
    profiles = [p for p in (_text(s) for s in _as_list(obj.get("sameAs"))) if p]

    return OrganizationData(
        name=_text(obj.get("name")),
        description=_text(obj.get("description")),
        url=_text(obj.get("url")),
        social_profiles=profiles,
        contacts=Contacts(
            telephone=_text(obj.get("telephone")) or _text(first_contact.get("telephone")),
            email=_text(obj.get("email")) or _text(first_contact.get("email")),
        ),
    )


def normalize_webpage(obj: dict[str, Any], schema_type: str = "WebPage") -> WebPageData:
    return WebPageData(
        type=schema_type,
        name=_text(obj.get("name")),
        url=_text(obj.get("url")),
        date_published=_text(obj.get("datePublished")),
        date_modified=_text(obj.get("dateModified")),
        description=_text(obj.get("description")),
        in_language=_text(obj.get("inLanguage")),
    )


def normalize_breadcrumbs(obj: dict[str, Any]) -> BreadcrumbListData:
    items: list[BreadcrumbItem] = []
    for entry in _as_list(obj.get("itemListElement")):
        if not isinstance(entry, dict):
            continue
        target = entry.get("item")
        if isinstance(target, dict):
            url = _text(target.get("@id")) or _text(target.get("url"))
            name = _text(entry.get("name")) or _text(target.get("name"))
        else:
            url = _text(target)
            name = _text(entry.get("name"))
        items.append(
            BreadcrumbItem(name=name, url=url, position=_position(entry.get("position"))),
        )
    return BreadcrumbListData(items=items)


_NORMALIZERS: dict[str, Callable[[dict[str, Any], str], StructuredDataItem]] = {
    "Product": lambda obj, _t: normalize_product(obj),
    "Organization": lambda obj, _t: normalize_organization(obj),
    "WebPage": normalize_webpage,
    "ItemPage": normalize_webpage,
    "BreadcrumbList": lambda obj, _t: normalize_breadcrumbs(obj),
}


def _dispatch_type(raw_type: Any) -> str | None:
    """Return the recognised type name for *raw_type*, if any."""
    if isinstance(raw_type, str):
        return raw_type if raw_type in _NORMALIZERS else None
    if isinstance(raw_type, list):
        for candidate in raw_type:
            if isinstance(candidate, str) and candidate in _NORMALIZERS:
                return candidate
    return None


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def normalize_item(obj: dict[str, Any]) -> StructuredDataItem | None:
    """Normalize one flattened JSON-LD object; None when it has no ``@type``."""
    raw_type = obj.get("@type")
    if not raw_type:
        return None

    schema_type = _dispatch_type(raw_type)
    if schema_type is not None:
        return _NORMALIZERS[schema_type](obj, schema_type)

    try:
        return OtherData.model_validate(obj)
    except ValidationError as exc:
        # @type present but not a string / list of strings
        logger.debug("Dropping JSON-LD object with unusable @type %r: %s", raw_type, exc)
        return None


def normalize_structured_data(objects: Iterable[dict[str, Any]]) -> list[StructuredDataItem]:
    """Normalize every object in *objects*, preserving order."""
    items: list[StructuredDataItem] = []
    for obj in objects:
        if not isinstance(obj, dict):
            continue
        item = normalize_item(obj)
        if item is not None:
            items.append(item)
    return items


# ---------------------------------------------------------------------------
# EAV projection
# ---------------------------------------------------------------------------

def _eav(entity: str, pairs: Iterable[tuple[str, str | None]]) -> list[EAVTriple]:
    return [
        EAVTriple(entity=entity, attribute=attribute, value=value)
        for attribute, value in pairs
        if value and value.strip()
    ]


def structured_to_triples(items: Iterable[StructuredDataItem]) -> list[EAVTriple]:
    """Project named Product and Organization items into EAV triples."""
    triples: list[EAVTriple] = []
    for item in items:
        if isinstance(item, ProductData) and item.name:
            triples.extend(_eav(item.name, [
                ("description", item.description),
                ("price", item.price),
                ("currency", item.currency),
                ("availability", item.availability),
            ]))
        elif isinstance(item, OrganizationData) and item.name:
            triples.extend(_eav(item.name, [
                ("description", item.description),
                ("url", item.url),
                ("telephone", item.contacts.telephone),
                ("email", item.contacts.email),
                *(("social profile", p) for p in item.social_profiles),
            ]))
    return triples
