"""
Pydantic Schemas for Request/Response Validation

Request bodies mirror the form fields of the owner, staff and customer
screens; responses mirror the table rows they read back.
"""

from pydantic import BaseModel, Field, field_validator
from typing import Optional, List
from datetime import datetime
import re

from servelink.enums import OrderStatus, StaffRole


# =============================================================================
# AUTH SCHEMAS
# =============================================================================

class SignupRequest(BaseModel):
    """Request schema for creating an account."""
    email: str = Field(..., max_length=255, examples=["owner@example.com"])
    password: str = Field(..., min_length=6, max_length=128)
    full_name: Optional[str] = Field(None, max_length=100, examples=["Asha Rao"])
    role: StaffRole = Field(default=StaffRole.OWNER, examples=["owner", "kitchen", "waiter"])

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str) -> str:
        v = v.strip().lower()
        if not re.match(r'^[\w\.\+-]+@[\w\.-]+\.\w+$', v):
            raise ValueError("Invalid email format")
        return v


class LoginRequest(BaseModel):
    email: str
    password: str

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.strip().lower()


class UserResponse(BaseModel):
    id: str
    email: str
    full_name: Optional[str]

    class Config:
        from_attributes = True


class ProfileResponse(BaseModel):
    user_id: str
    full_name: Optional[str]
    role: Optional[StaffRole]
    restaurant_id: Optional[str]

    class Config:
        from_attributes = True


class SessionResponse(BaseModel):
    """Current identity plus the panel the user should be routed to."""
    user: UserResponse
    profile: Optional[ProfileResponse]
    home_route: str


class TokenResponse(SessionResponse):
    access_token: str
    token_type: str = "bearer"


# =============================================================================
# RESTAURANT SCHEMAS
# =============================================================================

class RestaurantResponse(BaseModel):
    id: str
    name: str
    owner_id: str
    created_at: Optional[datetime]

    class Config:
        from_attributes = True


class RestaurantUpdate(BaseModel):
    name: str = Field(..., min_length=1, max_length=150)


# =============================================================================
# MENU SCHEMAS
# =============================================================================

class CategoryCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100, examples=["Starters"])
    description: Optional[str] = None
    is_active: bool = True
    display_order: int = 0


class CategoryUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = None
    is_active: Optional[bool] = None
    display_order: Optional[int] = None


class CategoryResponse(BaseModel):
    id: str
    restaurant_id: str
    name: str
    description: Optional[str]
    is_active: bool
    display_order: int

    class Config:
        from_attributes = True


class MenuItemCreate(BaseModel):
    """Single dish as entered in the menu item form."""
    name: str = Field(..., min_length=1, max_length=150, examples=["Paneer Tikka"])
    description: Optional[str] = None
    price: float = Field(..., ge=0, examples=[249.0])
    preparation_time: int = Field(default=15, ge=0)
    category_id: Optional[str] = None
    is_veg: bool = True
    is_available: bool = True
    image_url: Optional[str] = Field(None, max_length=500)

    @field_validator("category_id", "image_url")
    @classmethod
    def blank_to_none(cls, v: Optional[str]) -> Optional[str]:
        # Form selects and inputs send "" for "nothing chosen"
        if v is None or v.strip() == "":
            return None
        return v


class MenuItemUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=150)
    description: Optional[str] = None
    price: Optional[float] = Field(None, ge=0)
    preparation_time: Optional[int] = Field(None, ge=0)
    category_id: Optional[str] = None
    is_veg: Optional[bool] = None
    is_available: Optional[bool] = None
    image_url: Optional[str] = Field(None, max_length=500)

    @field_validator("category_id", "image_url")
    @classmethod
    def blank_to_none(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and v.strip() == "":
            return None
        return v


class MenuItemResponse(BaseModel):
    id: str
    restaurant_id: str
    category_id: Optional[str]
    name: str
    description: Optional[str]
    price: float
    preparation_time: Optional[int]
    is_veg: bool
    is_available: bool
    image_url: Optional[str]

    class Config:
        from_attributes = True


# =============================================================================
# TABLE SCHEMAS
# =============================================================================

class TableCreate(BaseModel):
    table_number: str = Field(..., min_length=1, max_length=20, examples=["12"])
    capacity: Optional[int] = Field(None, ge=1, le=100)

    @field_validator("table_number")
    @classmethod
    def strip_number(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Table number is required")
        return v


class TableResponse(BaseModel):
    id: str
    restaurant_id: str
    table_number: str
    capacity: int
    qr_code: Optional[str]

    class Config:
        from_attributes = True


# =============================================================================
# ORDER SCHEMAS
# =============================================================================

class OrderCreate(BaseModel):
    """Order header inserted at checkout, before its items."""
    restaurant_id: str
    table_id: Optional[str] = None
    total_amount: Optional[float] = Field(None, ge=0, examples=[250.0])
    customer_notes: Optional[str] = Field(None, max_length=500)


class OrderItemCreate(BaseModel):
    """Single line inserted in the batch that follows the order insert."""
    menu_item_id: str
    quantity: int = Field(..., ge=1, examples=[2])
    unit_price: float = Field(..., ge=0, examples=[100.0])
    special_instructions: Optional[str] = None

    @property
    def line_total(self) -> float:
        return round(self.quantity * self.unit_price, 2)


class OrderStatusUpdate(BaseModel):
    status: OrderStatus


class OrderItemResponse(BaseModel):
    id: str
    order_id: str
    menu_item_id: str
    menu_item_name: Optional[str]
    preparation_time: Optional[int]
    quantity: int
    unit_price: float
    special_instructions: Optional[str]

    class Config:
        from_attributes = True


class OrderResponse(BaseModel):
    """Response schema for a single order with its lines."""
    id: str
    restaurant_id: str
    table_id: Optional[str]
    table_number: Optional[str]
    order_number: str
    status: OrderStatus
    total_amount: Optional[float]
    customer_notes: Optional[str]
    created_at: datetime
    updated_at: Optional[datetime]
    items: List[OrderItemResponse] = []

    class Config:
        from_attributes = True


class OrderListResponse(BaseModel):
    """Response for listing multiple orders."""
    total: int
    orders: List[OrderResponse]


# =============================================================================
# STAFF SCHEMAS
# =============================================================================

class StaffAssignRequest(BaseModel):
    """Attach an existing account to the owner's restaurant."""
    email: str
    role: StaffRole

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.strip().lower()


class StaffMemberResponse(BaseModel):
    user_id: str
    full_name: Optional[str]
    role: Optional[StaffRole]
    restaurant_id: Optional[str]
    panel_link: Optional[str] = None


# =============================================================================
# ANALYTICS SCHEMAS
# =============================================================================

class DailyRevenue(BaseModel):
    day: str
    revenue: float


class TopItem(BaseModel):
    name: str
    quantity: int


class AnalyticsResponse(BaseModel):
    total_orders: int
    total_revenue: float
    avg_order_value: float
    total_tables: int
    revenue_by_day: List[DailyRevenue]
    top_items: List[TopItem]


# =============================================================================
# PUBLIC MENU SCHEMAS
# =============================================================================

class PublicMenuResponse(BaseModel):
    """Everything the customer menu page needs after scanning a table QR."""
    restaurant_id: str
    restaurant_name: str
    table_number: Optional[str] = None
    table_id: Optional[str] = None
    categories: List[CategoryResponse]
    items: List[MenuItemResponse]


# =============================================================================
# GENERIC RESPONSES
# =============================================================================

class MessageResponse(BaseModel):
    success: bool = True
    message: str


class ErrorResponse(BaseModel):
    """Standard error response."""
    success: bool = False
    error: str
    detail: Optional[str] = None


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    database: str
    change_feed: str
    timestamp: datetime
