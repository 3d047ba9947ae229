"""Filter and projection documents for reading sales."""

import re
from typing import Any, Dict, Optional

LIST_LIMIT = 10
SEARCH_LIMIT = 10

LIST_PROJECTION = {"_id": 0, "storeLocation": 1, "items": 1, "customer.email": 1}
DETAIL_PROJECTION = {"_id": 0, "items": 0}
SEARCH_PROJECTION = {"_id": 0, "items": 1, "storeLocation": 1, "purchaseMethod": 1}


def _contains(text: str) -> Dict[str, str]:
    # Case-insensitive literal substring match
    return {"$regex": re.escape(text), "$options": "i"}


def build_sale_filter(
    purchase_method: Optional[str] = None,
    item: Optional[str] = None,
    store_location: Optional[str] = None,
) -> Dict[str, Any]:
    """Build the Mongo filter for a sales search.

    Only parameters that are present (non-empty) add a constraint; with none
    of them the filter matches every sale. ``item`` matches when any entry of
    ``items`` has a name containing it.
    """
    query: Dict[str, Any] = {}
    if purchase_method:
        query["purchaseMethod"] = _contains(purchase_method)
    if item:
        query["items.name"] = _contains(item)
    if store_location:
        query["storeLocation"] = _contains(store_location)
    return query
