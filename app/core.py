# app/core.py
import math
from typing import Annotated, Optional, Dict, Any, List

import pydantic
from pydantic import AfterValidator, BaseModel, BeforeValidator, ConfigDict, Field, field_validator

from .errors import ValidationError

# This file holds the request schemas and validation rules for product payloads.

PRODUCT_FIELDS = ("name", "description", "price", "category", "inStock")

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10

CREATE_MESSAGES = {
    "name": "Name is required and must be a non-empty string.",
    "description": "Description is required and must be a non-empty string.",
    "price": "Price is required and must be a positive number.",
    "category": "Category is required and must be a non-empty string.",
    "inStock": "inStock must be a boolean if provided.",
}

UPDATE_MESSAGES = {
    "name": "Name must be a non-empty string if provided.",
    "description": "Description must be a non-empty string if provided.",
    "price": "Price must be a positive number if provided.",
    "category": "Category must be a non-empty string if provided.",
    "inStock": "inStock must be a boolean if provided.",
}


# ---------------------------
# Pydantic schemas
# ---------------------------
def _not_blank(v: str) -> str:
    if not v.strip():
        raise ValueError("must not be empty or whitespace only")
    return v


def _finite_price(v: Any) -> Any:
    # JSON true/false is not a price, and bool would pass as an int
    if isinstance(v, bool):
        raise ValueError("price must be a number")
    if isinstance(v, (int, float)):
        try:
            finite = math.isfinite(float(v))
        except OverflowError:
            finite = False
        if not finite:
            raise ValueError("price must be a finite number")
    return v


NonBlankStr = Annotated[str, AfterValidator(_not_blank)]
Price = Annotated[float, BeforeValidator(_finite_price), Field(gt=0)]


class ProductCreate(BaseModel):
    model_config = ConfigDict(extra="ignore", strict=True, allow_inf_nan=False)

    name: NonBlankStr
    description: NonBlankStr
    price: Price
    category: NonBlankStr
    inStock: bool = True


class ProductUpdate(BaseModel):
    model_config = ConfigDict(extra="ignore", strict=True, allow_inf_nan=False)

    name: Optional[NonBlankStr] = None
    description: Optional[NonBlankStr] = None
    price: Optional[Price] = None
    category: Optional[NonBlankStr] = None
    inStock: Optional[bool] = None

    @field_validator("name", "description", "price", "category", "inStock", mode="before")
    @classmethod
    def no_null(cls, v):
        # only runs for supplied keys; an explicit null is not a value
        if v is None:
            raise ValueError("must not be null")
        return v


def _require_object(body: Any) -> Dict[str, Any]:
    if body is None:
        return {}
    if not isinstance(body, dict):
        raise ValidationError("Validation failed", ["Request body must be a JSON object."])
    return body


def _failed_fields(exc: pydantic.ValidationError) -> set:
    return {e["loc"][0] for e in exc.errors() if e["loc"]}


def _messages(failed: set, messages: Dict[str, str]) -> List[str]:
    return [messages[f] for f in PRODUCT_FIELDS if f in failed]


# ---------------------------
# Create / update validation
# ---------------------------
def validate_product_create(body: Any) -> Dict[str, Any]:
    """
    Full validation for product creation.

    Every violation is collected before raising, so the caller sees all of
    them in a single 400 response. Returns the validated fields with
    ``inStock`` defaulted.
    """
    body = _require_object(body)
    try:
        product = ProductCreate.model_validate(body)
    except pydantic.ValidationError as exc:
        raise ValidationError("Validation failed", _messages(_failed_fields(exc), CREATE_MESSAGES))
    return product.model_dump()


def validate_product_update(body: Any) -> Dict[str, Any]:
    """
    Partial validation for product updates.

    Only fields that are present are checked. Unknown keys are ignored, but a
    non-empty body in which no known field passes its check is rejected.
    Returns just the supplied fields.
    """
    body = _require_object(body)
    if not body:
        raise ValidationError("Validation failed", ["Request body cannot be empty for product update."])

    failed: set = set()
    update = None
    try:
        update = ProductUpdate.model_validate(body)
    except pydantic.ValidationError as exc:
        failed = _failed_fields(exc)

    errors = _messages(failed, UPDATE_MESSAGES)
    accepted = [f for f in PRODUCT_FIELDS if f in body and f not in failed]
    if not accepted:
        errors.append("No valid fields provided for product update.")
    if errors:
        raise ValidationError("Validation failed", errors)

    return update.model_dump(exclude_unset=True)


def pick_product_fields(body: Dict[str, Any]) -> Dict[str, Any]:
    """Known product fields from a validated body; everything else is dropped."""
    return {k: body[k] for k in PRODUCT_FIELDS if k in body}


# ---------------------------
# Query parameter helpers
# ---------------------------
def _parse_int(raw: Optional[str]) -> Optional[int]:
    if raw is None:
        return None
    try:
        return int(str(raw).strip())
    except ValueError:
        return None


def resolve_pagination(page: Optional[str], limit: Optional[str]) -> Dict[str, int]:
    """
    Turn raw ``page``/``limit`` query values into positive integers.

    Missing or non-numeric values fall back to the defaults; numeric values
    below 1 are rejected.
    """
    page_num = _parse_int(page)
    limit_num = _parse_int(limit)
    if page_num is None:
        page_num = DEFAULT_PAGE
    if limit_num is None:
        limit_num = DEFAULT_LIMIT

    if page_num < 1 or limit_num < 1:
        raise ValidationError("Page and limit must be positive integers.")
    return {"page": page_num, "limit": limit_num}


def require_search_query(q: Any) -> str:
    if not isinstance(q, str) or not q.strip():
        raise ValidationError("Search query (q) is required and must be a non-empty string.")
    return q
