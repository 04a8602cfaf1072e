"""
Wire schemas for the store backend (WordPress `ims/v1` REST API).

Each response is validated against exactly one model. A body that does not
match raises instead of being patched up with fallback field names.
"""
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from models import Customer, Product


class WireModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra='ignore')


class Pagination(WireModel):
    current_page: int = Field(1, alias='currentPage', ge=1)
    total_pages: int = Field(1, alias='totalPages', ge=0)
    total_items: int = Field(0, alias='totalItems', ge=0)
    items_per_page: int = Field(20, alias='itemsPerPage', ge=1)
    has_next_page: bool = Field(False, alias='hasNextPage')
    has_previous_page: bool = Field(False, alias='hasPreviousPage')


class ProductRecord(WireModel):
    id: int
    name: str
    sku: str = ''
    price: float = Field(..., ge=0, description="Unit selling price")
    stock: float = Field(0, description="Units on hand, may be negative when oversold")
    unit: str = Field('piece', description="Measurement unit (piece, kg, m, ...)")
    category: Optional[str] = None

    def to_product(self):
        return Product(self.id, self.name, self.sku, self.price, self.stock, self.unit, self.category)


class CustomerRecord(WireModel):
    id: int
    name: str
    phone: Optional[str] = None
    email: Optional[str] = None

    def to_customer(self):
        return Customer(self.id, self.name, self.phone, self.email)


class ProductPageData(WireModel):
    products: List[ProductRecord]
    pagination: Pagination = Field(default_factory=Pagination)


class ProductListResponse(WireModel):
    success: bool
    data: ProductPageData


class ProductResponse(WireModel):
    success: bool
    data: ProductRecord


class CustomerPageData(WireModel):
    customers: List[CustomerRecord]
    pagination: Pagination = Field(default_factory=Pagination)


class CustomerListResponse(WireModel):
    success: bool
    data: CustomerPageData


class SaleItemPayload(WireModel):
    product_id: int = Field(..., alias='productId')
    quantity: float = Field(..., gt=0)
    unit_price: float = Field(..., alias='unitPrice', ge=0)


class SalePayload(WireModel):
    customer_id: Optional[int] = Field(None, alias='customerId')
    items: List[SaleItemPayload] = Field(..., min_length=1)
    discount: float = Field(0, ge=0)
    payment_method: str = Field('cash', alias='paymentMethod')
    notes: str = ''

    def to_wire(self):
        return self.model_dump(by_alias=True)


class SaleRecord(WireModel):
    id: int
    order_number: Optional[str] = Field(None, alias='orderNumber')
    total: Optional[float] = None
    status: Optional[str] = None
    created_at: Optional[str] = Field(None, alias='createdAt')


class SaleConfirmation(WireModel):
    success: bool
    data: SaleRecord
    message: Optional[str] = None
