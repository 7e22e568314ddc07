from datetime import datetime
from typing import Annotated, Any, List, Optional

from pydantic import BaseModel, BeforeValidator, EmailStr, Field, field_validator
from pydantic.alias_generators import to_camel
from pydantic.config import ConfigDict

from .models import Role
from .utils import sanitize_text


def _clean(value: Any) -> Any:
    return sanitize_text(value) if isinstance(value, str) else value


Text = Annotated[str, BeforeValidator(_clean), Field(min_length=1, max_length=200)]
OptionalText = Optional[Annotated[str, BeforeValidator(_clean), Field(max_length=500)]]


class CamelModel(BaseModel):
    # JSON keys are camelCase; snake_case is accepted on input too
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


# -------------------- Users --------------------

class UserCreate(CamelModel):
    name: Text
    email: EmailStr
    password: str = Field(..., min_length=1, max_length=128)
    role: Role
    business_name: OptionalText = None
    gst_number: OptionalText = None
    shop_name: OptionalText = None
    shop_address: OptionalText = None


class UserRead(CamelModel):
    """Outward user representation. There is deliberately no password field."""
    id: int
    name: str
    email: str
    role: Role
    business_name: Optional[str] = None
    gst_number: Optional[str] = None
    shop_name: Optional[str] = None
    shop_address: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class LoginRequest(BaseModel):
    # plain str: a malformed email must fail like any other bad credential
    email: str
    password: str


# -------------------- Products --------------------

class ProductCreate(CamelModel):
    name: Text
    price: float = Field(..., ge=0)
    category: OptionalText = None
    image: OptionalText = None


class ProductUpdate(CamelModel):
    """Partial update. The owning wholesaler is not part of the payload."""
    name: Optional[Text] = None
    price: Optional[float] = Field(default=None, ge=0)
    category: OptionalText = None
    image: OptionalText = None

    @field_validator("name", "price")
    @classmethod
    def not_null(cls, v):
        if v is None:
            raise ValueError("must not be null")
        return v


class ProductRead(CamelModel):
    id: int
    name: str
    price: float
    category: Optional[str] = None
    image: Optional[str] = None
    wholesaler_id: int
    created_at: datetime
    updated_at: datetime


# -------------------- Orders --------------------

class OrderCreate(CamelModel):
    product_name: Text
    price: float = Field(..., ge=0)
    quantity: int = Field(..., ge=1)
    address: OptionalText = None
    payment_method: OptionalText = None
    payment_status: Text = "Pending"
    razorpay_order_id: OptionalText = None
    razorpay_payment_id: OptionalText = None
    customer_name: OptionalText = None
    email: OptionalText = None
    phone: OptionalText = None
    status: Text = "Processing"


class OrderRead(CamelModel):
    id: int
    product_name: str
    price: float
    quantity: int
    address: Optional[str] = None
    payment_method: Optional[str] = None
    payment_status: str
    razorpay_order_id: Optional[str] = None
    razorpay_payment_id: Optional[str] = None
    customer_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    status: str
    created_at: datetime
    updated_at: datetime


# -------------------- Payments --------------------

class ChargeOrderRequest(BaseModel):
    amount: float = Field(..., gt=0, allow_inf_nan=False)


class GatewayKey(BaseModel):
    key: str


# -------------------- Response envelopes --------------------

class SuccessResponse(BaseModel):
    success: bool = True


class SignupResponse(SuccessResponse):
    message: str = "Account created"
    user: UserRead


class LoginResponse(SuccessResponse):
    token: str
    user: UserRead


class WholesalerList(SuccessResponse):
    wholesalers: List[UserRead]


class ProductEnvelope(SuccessResponse):
    product: ProductRead


class ProductList(SuccessResponse):
    products: List[ProductRead]


class OrderEnvelope(SuccessResponse):
    order: OrderRead


class OrderList(SuccessResponse):
    orders: List[OrderRead]
