"""
Pydantic models for the Butler Coffee API.
"""
from typing import Generic, List, Optional, TypeVar
from pydantic import BaseModel, ConfigDict, Field, model_validator

T = TypeVar("T")


def _round_decimal(value: Optional[str]) -> int:
    """Decimal string (DecimalField serializes as string) rounded half up"""
    if not value:
        return 0
    try:
        return int(float(value) + 0.5)
    except ValueError:
        return 0


def _to_float(value: Optional[str]) -> float:
    try:
        return float(value) if value else 0.0
    except ValueError:
        return 0.0


class ApiModel(BaseModel):
    """Base for API payloads

    Decimal fields arrive as strings or numbers depending on the endpoint, and
    optional text fields are sometimes null; both are normalized here.
    """
    model_config = ConfigDict(coerce_numbers_to_str=True)

    @model_validator(mode="before")
    @classmethod
    def _drop_nulls(cls, data):
        if isinstance(data, dict):
            return {key: value for key, value in data.items() if value is not None}
        return data


class Meta(ApiModel):
    """Envelope metadata"""
    code: Optional[int] = None
    message: Optional[str] = None


class Envelope(ApiModel, Generic[T]):
    """Standard ``{"meta": ..., "data": ...}`` wrapper

    A null or missing ``data`` decodes to None; see :func:`unwrap`.
    """
    meta: Optional[Meta] = None
    data: Optional[T] = None


def unwrap(envelope: Optional[Envelope], default=None):
    """Payload of a decoded envelope, or ``default`` for an empty body or null data"""
    if envelope is None or envelope.data is None:
        return default
    return envelope.data


class Page(ApiModel, Generic[T]):
    """Paginated list payload"""
    count: int = 0
    next: Optional[str] = None
    previous: Optional[str] = None
    results: List[T] = []


# Auth

class LoginRequest(ApiModel):
    username: str
    password: str


class RegisterRequest(ApiModel):
    username: str
    email: str
    password: str


class AuthTokens(ApiModel):
    """Tokens returned by login, register and refresh"""
    access_token: str
    refresh_token: str = ""
    expires_at: Optional[str] = None
    refresh_token_expires_at: Optional[str] = None
    user_id: Optional[str] = None
    id: Optional[str] = None  # Present on register


# Catalog / subscriptions

class AvailablePlan(ApiModel):
    """Subscription tier or one-time product"""
    id: str = ""
    tier: str = ""
    name: str = ""
    price: str = "0"
    currency: str = ""
    billing_period: str = ""
    summary: str = ""
    description: str = ""
    features: List[str] = []
    is_subscription: bool = False
    is_active: bool = False
    min_quantity: int = 0
    max_quantity: int = 0

    @property
    def price_value(self) -> float:
        return _to_float(self.price)


class SubscriptionPreference(ApiModel):
    """Default coffee preference attached to a subscription"""
    id: str = ""
    quantity: str = ""
    grind_type: str = ""
    brewing_method: str = ""
    notes: str = ""

    @property
    def quantity_value(self) -> int:
        return _round_decimal(self.quantity)


class Subscription(ApiModel):
    id: str = ""
    tier: str = ""
    status: str = ""
    stripe_payment_link: str = ""
    started_at: Optional[str] = None
    expires_at: Optional[str] = None
    created_on: str = ""
    default_quantity: str = ""
    default_preferences: List[SubscriptionPreference] = []

    @property
    def total_quantity(self) -> int:
        return _round_decimal(self.default_quantity)


# Orders

class OrderLineItem(ApiModel):
    """Line item sent to the API"""
    quantity: int
    grind_type: str
    brewing_method: str
    notes: Optional[str] = None


class OrderLineItemResponse(ApiModel):
    """Line item as returned by the API (quantity as decimal string)"""
    id: str = ""
    quantity: str = ""
    grind_type: str = ""
    brewing_method: str = ""
    notes: str = ""

    @property
    def quantity_value(self) -> float:
        return _to_float(self.quantity)


class Order(ApiModel):
    id: str = ""
    tier: str = ""
    total_quantity: str = ""
    line_items: List[OrderLineItemResponse] = []
    status: str = ""
    expected_shipment_date: Optional[str] = None
    created_on: str = ""

    @property
    def total_quantity_value(self) -> float:
        return _to_float(self.total_quantity)


class CreateOrderRequest(ApiModel):
    tier: Optional[str] = None
    product_id: Optional[str] = None
    total_quantity: int
    line_items: List[OrderLineItem]


class UpdateSubscriptionRequest(ApiModel):
    total_quantity: Optional[int] = None
    preferences: Optional[List[OrderLineItem]] = None


class CheckoutSession(ApiModel):
    checkout_url: str = ""
    session_id: str = ""
    order_id: str = ""


# Content

class Category(ApiModel):
    id: str = ""
    slug: str = ""
    name: str = ""
    description: str = ""
    order: int = 0
    published_at: Optional[str] = None


class Section(ApiModel):
    id: str = ""
    category_id: str = ""
    name: str = ""
    description: str = ""
    order: int = 0
    published_at: Optional[str] = None


class Article(ApiModel):
    id: str = ""
    category_id: str = ""
    section_id: Optional[str] = None  # None when in the category's default section
    title: str = ""
    summary: str = ""
    content: str = ""  # Markdown
    author: str = ""
    read_time: int = 0  # Minutes
    tags: str = ""  # Comma-separated
    published_at: Optional[str] = None
    is_bookmarked: bool = False  # Only meaningful for authenticated users


class Bookmark(ApiModel):
    id: str = ""
    article_id: str = ""
    article: Article = Field(default_factory=Article)
    created_at: str = ""
