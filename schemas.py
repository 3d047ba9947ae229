"""
Database Schemas

Pydantic models for the documents stored in MongoDB and the request bodies
that create or change them. Field names follow the stored documents
(camelCase for sales, as in the sample_supplies dataset).
"""

from datetime import datetime
from typing import Any, Dict, List, Optional, Union

from bson import ObjectId
from pydantic import BaseModel, EmailStr, Field, StrictFloat, StrictInt


class SaleItem(BaseModel):
    name: str = Field(..., min_length=1)
    tags: List[str] = Field(default_factory=list)
    # Numbers are kept exactly as sent
    price: Union[StrictInt, StrictFloat]
    quantity: StrictInt


class Customer(BaseModel):
    gender: Optional[str] = None
    age: Optional[StrictInt] = None
    email: Optional[str] = None
    satisfaction: Optional[StrictInt] = None


class SaleIn(BaseModel):
    items: List[SaleItem]
    storeLocation: str = Field(..., min_length=1)
    customer: Customer
    couponUsed: bool = Field(..., description="Required, but false is a valid value")
    purchaseMethod: str = Field(..., min_length=1, description="Observed: Online | In store")


class SaleReplace(SaleIn):
    saleDate: datetime = Field(..., description="Taken from the caller on full replace")


class ReviewIn(BaseModel):
    user: str = Field(..., min_length=1)
    rating: float
    comment: str = Field(..., min_length=1)


class UserIn(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class LoginIn(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"


def _convert(value: Any) -> Any:
    if isinstance(value, ObjectId):
        return str(value)
    if isinstance(value, dict):
        return {k: _convert(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_convert(v) for v in value]
    return value


def serialize_doc(doc: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    if not doc:
        return doc
    doc = _convert(dict(doc))
    if "_id" in doc:
        doc["id"] = doc.pop("_id")
    return doc


def as_document(model: BaseModel) -> Dict[str, Any]:
    # Only what the caller sent; defaults are not written to the store
    return model.model_dump(exclude_unset=True)
