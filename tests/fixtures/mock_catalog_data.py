"""Mock catalogue records and plan replies for QuoteGen tests."""

from typing import Any, Dict, List

# ============================================================================
# Catalogue records, as returned by GET /search-products
# ============================================================================

RAJ_GREEN_RECORD: Dict[str, Any] = {
    "id": 101,
    "name": "Indian Sandstone Paving Slabs - Raj Green 600x600mm",
    "image": "https://catalog.test/img/raj-green.jpg",
    "description": "<p>Hand-cut <strong>natural</strong> sandstone.</p>",
    "link": "https://catalog.test/product/raj-green",
}

BUFF_RECORD: Dict[str, Any] = {
    "id": 102,
    "title": "Sandstone Paving Slabs (Buff) 22mm Pack of 20",
    "image_url": "https://catalog.test/img/buff.jpg",
    "short_description": "Riven buff sandstone, calibrated 22mm.",
    "url": "https://catalog.test/product/buff",
}

UTILITY_CONCRETE_RECORD: Dict[str, Any] = {
    "id": 103,
    "name": "Utility Concrete Paving Slab 450x450mm",
    "description": "Pressed concrete flag for paths.",
    "link": "https://catalog.test/product/utility-flag",
}

PIGMENT_RECORD: Dict[str, Any] = {
    "id": 104,
    "name": "Sandstone Paving Pigment Dye",
    "link": "https://catalog.test/product/pigment",
}

SHARP_SAND_RECORD: Dict[str, Any] = {
    "id": 201,
    "name": "Sharp Sand Bulk Bag",
    "link": "https://catalog.test/product/sharp-sand",
}

SANDSTONE_RECORDS: List[Dict[str, Any]] = [RAJ_GREEN_RECORD, BUFF_RECORD]

STONE_TERMS = ("stone", "sandstone", "paving", "patio", "slab", "flags", "natural")


def stone_catalog(query: str) -> List[Dict[str, Any]]:
    """Sandstone products for stone-like queries, nothing for anything else."""
    query = query.lower()
    if any(term in query for term in STONE_TERMS):
        return list(SANDSTONE_RECORDS)
    return []


# ============================================================================
# Plan replies
# ============================================================================

PATIO_PLAN: Dict[str, Any] = {
    "materials": [
        {"name": "Sandstone Paving Slabs", "quantity": 13.2, "unit": "m²"},
        {"name": "Cement (to be quoted)", "quantity": 4, "unit": "bags"},
    ],
    "method": {
        "steps": [
            "Mark out the 4x3m area and excavate to 150mm",
            "Lay and compact MOT Type 1 sub-base",
            "Bed slabs on a full mortar bed",
            "Point the joints",
        ],
        "considerations": ["Allow a 1:60 fall away from the house"],
    },
    "customerQuote": {
        "rewrittenProjectSummary": "Supply and lay a 12m² natural sandstone patio.",
        "labourHours": 16,
    },
}

MALFORMED_PLAN: Dict[str, Any] = {
    "materials": {"name": "not a list"},
    "method": "dig a hole",
    "customerQuote": {"labourHours": "lots"},
}
