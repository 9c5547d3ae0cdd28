# app/models.py
from pydantic import BaseModel
from typing import Optional, Dict, List

class Product(BaseModel):
    id: str
    name: str
    description: str
    price: float
    category: str
    inStock: bool = True

class ProductPage(BaseModel):
    page: int
    limit: int
    totalProducts: int
    totalPages: int
    data: List[Product]

class ProductStats(BaseModel):
    totalProducts: int
    totalCategories: int
    countByCategory: Dict[str, int]
    totalInStock: int
    totalOutOfStock: int
    averagePrice: float

class ErrorResponse(BaseModel):
    success: bool = False
    message: str
    errors: Optional[List[str]] = None
