from typing import List, Literal, Optional
from datetime import datetime
from pydantic import BaseModel, Field, EmailStr, field_validator

ShopStatus = Literal["pending", "active", "suspended", "closed"]
OrderStatus = Literal["pending", "confirmed", "completed", "cancelled"]
PaymentDecision = Literal["confirmed", "rejected"]
Plan = Literal["free", "basic", "premium"]


# --- Auth ---
class ShopRegister(BaseModel):
    shop_number: str = Field(..., min_length=1, max_length=50)
    shop_name: str = Field(..., min_length=1, max_length=200)
    contact: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=72)
    till_number: Optional[str] = None
    payment_provider: Optional[str] = None
    payment_notes: Optional[str] = None


class ShopLogin(BaseModel):
    email: EmailStr
    password: str


class AdminLogin(BaseModel):
    username: str
    password: str


class PasswordChange(BaseModel):
    current_password: str = Field(..., alias="currentPassword")
    new_password: str = Field(..., alias="newPassword", min_length=6, max_length=72)

    class Config:
        populate_by_name = True


# --- Shop ---
class ShopPublic(BaseModel):
    id: int
    shop_number: str
    shop_name: str
    contact: str
    email: str
    status: str


class ShopProfile(ShopPublic):
    till_number: Optional[str] = None
    payment_provider: Optional[str] = None
    payment_notes: Optional[str] = None


class ShopProfileUpdate(BaseModel):
    shop_name: Optional[str] = Field(None, min_length=1, max_length=200)
    contact: Optional[str] = Field(None, min_length=1, max_length=100)
    email: Optional[EmailStr] = None
    till_number: Optional[str] = None
    payment_provider: Optional[str] = None
    payment_notes: Optional[str] = None

    @field_validator("shop_name", "contact", "email")
    @classmethod
    def not_null(cls, value):
        # Omit the field to leave it unchanged; null would clear a required column
        if value is None:
            raise ValueError("may not be null")
        return value


# --- Product ---
class SizeIn(BaseModel):
    size: str = Field(..., min_length=1, max_length=20)
    in_stock: bool = True
    quantity: int = Field(0, ge=0)


class ProductCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    price: float = Field(..., ge=0)
    image_url: Optional[str] = None
    public_id: Optional[str] = None
    category: str = "shoes"
    sizes: List[SizeIn] = []


class ProductUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = None
    price: Optional[float] = Field(None, ge=0)
    image_url: Optional[str] = None
    public_id: Optional[str] = None
    category: Optional[str] = None
    sizes: Optional[List[SizeIn]] = None

    @field_validator("name", "price", "category")
    @classmethod
    def not_null(cls, value):
        if value is None:
            raise ValueError("may not be null")
        return value


class SizeStockUpdate(BaseModel):
    in_stock: bool


# --- Order ---
class OrderCreate(BaseModel):
    shop_id: int
    product_id: int
    customer_name: str = Field(..., min_length=1, max_length=200)
    customer_contact: str = Field(..., min_length=1, max_length=100)
    size: str = Field(..., min_length=1, max_length=20)
    notes: Optional[str] = None
    payment_reference: Optional[str] = None


class OrderStatusUpdate(BaseModel):
    status: OrderStatus


class PaymentUpdate(BaseModel):
    payment_status: PaymentDecision
    payment_reference: Optional[str] = None


# --- Admin ---
class ShopStatusUpdate(BaseModel):
    status: ShopStatus


class SubscriptionUpdate(BaseModel):
    plan: Plan
    monthly_fee: float = Field(0, ge=0)
    status: str = "active"
    end_date: Optional[datetime] = None


class AdminStats(BaseModel):
    totalShops: int
    activeShops: int
    totalProducts: int
    totalOrders: int


# --- Notifications ---
class PushSubscriptionIn(BaseModel):
    subscription: dict
