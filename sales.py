import logging
from datetime import datetime, timezone
from typing import Any, Dict, List

from bson import ObjectId
from pymongo.database import Database

from database import SALES
from errors import NotFound
from queries import (
    DETAIL_PROJECTION,
    LIST_LIMIT,
    LIST_PROJECTION,
    SEARCH_LIMIT,
    SEARCH_PROJECTION,
    build_sale_filter,
)
from schemas import SaleIn, SaleReplace, as_document, serialize_doc

logger = logging.getLogger(__name__)

SALE_NOT_FOUND = "Sale not found"


def parse_sale_id(sale_id: str) -> ObjectId:
    # A malformed id can't name a stored sale, so it is reported as not found
    if not ObjectId.is_valid(sale_id):
        raise NotFound(SALE_NOT_FOUND)
    return ObjectId(sale_id)


def list_sales(db: Database) -> List[Dict[str, Any]]:
    cursor = db[SALES].find({}, LIST_PROJECTION).limit(LIST_LIMIT)
    return [serialize_doc(doc) for doc in cursor]


def search_sales(db: Database, purchase_method=None, item=None, store_location=None) -> List[Dict[str, Any]]:
    query = build_sale_filter(purchase_method, item, store_location)
    cursor = db[SALES].find(query, SEARCH_PROJECTION).limit(SEARCH_LIMIT)
    return [serialize_doc(doc) for doc in cursor]


def get_sale(db: Database, sale_id: str) -> Dict[str, Any]:
    oid = parse_sale_id(sale_id)
    sale = db[SALES].find_one({"_id": oid}, DETAIL_PROJECTION)
    if sale is None:
        raise NotFound(SALE_NOT_FOUND)
    return serialize_doc(sale)


def create_sale(db: Database, data: SaleIn) -> str:
    """Insert a new sale, stamping ``saleDate`` with the server time."""
    doc = as_document(data)
    doc["saleDate"] = datetime.now(timezone.utc)
    result = db[SALES].insert_one(doc)
    logger.info("Sale %s created", result.inserted_id)
    return str(result.inserted_id)


def replace_sale(db: Database, sale_id: str, data: SaleReplace) -> None:
    """Overwrite every sale field except ``reviews``, which $set leaves alone."""
    oid = parse_sale_id(sale_id)
    result = db[SALES].update_one({"_id": oid}, {"$set": as_document(data)})
    if result.matched_count == 0:
        raise NotFound(SALE_NOT_FOUND)
    logger.info("Sale %s replaced", sale_id)


def delete_sale(db: Database, sale_id: str) -> None:
    oid = parse_sale_id(sale_id)
    result = db[SALES].delete_one({"_id": oid})
    if result.deleted_count == 0:
        raise NotFound(SALE_NOT_FOUND)
    logger.info("Sale %s deleted", sale_id)
