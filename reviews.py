"""
Reviews embedded in a sale's ``reviews`` array.

Each review is addressed by its own ``review_id``. All three mutations are a
single ``update_one`` on the parent sale, so MongoDB applies them atomically
per document and a concurrent reader never sees a half-applied change.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, Union

from bson import ObjectId
from pymongo.database import Database

from database import SALES
from errors import NotFound
from sales import SALE_NOT_FOUND, parse_sale_id
from schemas import ReviewIn

logger = logging.getLogger(__name__)

REVIEW_NOT_FOUND = "Review not found"


def _review_key(review_id: str) -> Union[ObjectId, str]:
    # A malformed id is kept as a string: it matches no stored review
    return ObjectId(review_id) if ObjectId.is_valid(review_id) else review_id


def _review_doc(review_id: ObjectId, data: ReviewIn) -> Dict[str, Any]:
    return {
        "review_id": review_id,
        "user": data.user,
        "rating": float(data.rating),
        "comment": data.comment,
        "date": datetime.now(timezone.utc),
    }


def add_review(db: Database, sale_id: str, data: ReviewIn) -> str:
    oid = parse_sale_id(sale_id)
    review_id = ObjectId()
    result = db[SALES].update_one(
        {"_id": oid},
        {"$push": {"reviews": _review_doc(review_id, data)}},
    )
    if result.matched_count == 0:
        raise NotFound(SALE_NOT_FOUND)
    logger.info("Review %s added to sale %s", review_id, sale_id)
    return str(review_id)


def update_review(db: Database, sale_id: str, review_id: str, data: ReviewIn) -> str:
    """Replace the whole review entry in place.

    The id comes from the path and the date is reset. A missing sale and a
    missing review are the same outcome here.
    """
    oid = parse_sale_id(sale_id)
    key = _review_key(review_id)
    result = db[SALES].update_one(
        {"_id": oid, "reviews.review_id": key},
        {"$set": {"reviews.$": _review_doc(key, data)}},
    )
    if result.matched_count == 0:
        raise NotFound("Sale or review not found")
    logger.info("Review %s on sale %s updated", review_id, sale_id)
    return review_id


def delete_review(db: Database, sale_id: str, review_id: str) -> None:
    oid = parse_sale_id(sale_id)
    result = db[SALES].update_one(
        {"_id": oid},
        {"$pull": {"reviews": {"review_id": _review_key(review_id)}}},
    )
    if result.matched_count == 0:
        raise NotFound(SALE_NOT_FOUND)
    if result.modified_count == 0:
        raise NotFound(REVIEW_NOT_FOUND)
    logger.info("Review %s removed from sale %s", review_id, sale_id)
