# pixelbridge_project/models/event_models.py
from pydantic import BaseModel, ConfigDict, Field
from typing import Any, Dict, List, Optional
from enum import Enum


class EventName(str, Enum):
    PURCHASE = "Purchase"
    ADD_TO_CART = "AddToCart"
    INITIATE_CHECKOUT = "InitiateCheckout"
    LEAD = "Lead"
    COMPLETE_REGISTRATION = "CompleteRegistration"
    VIEW_CONTENT = "ViewContent"
    SEARCH = "Search"
    ADD_TO_WISHLIST = "AddToWishlist"
    PAGE_VIEW = "PageView"


EVENT_DESCRIPTIONS: Dict[EventName, str] = {
    EventName.PURCHASE: "Purchase completed",
    EventName.ADD_TO_CART: "Product added to cart",
    EventName.INITIATE_CHECKOUT: "Checkout started",
    EventName.LEAD: "Lead captured",
    EventName.COMPLETE_REGISTRATION: "Registration completed",
    EventName.VIEW_CONTENT: "Content viewed",
    EventName.SEARCH: "Search performed",
    EventName.ADD_TO_WISHLIST: "Added to wishlist",
    EventName.PAGE_VIEW: "Page viewed",
}

# custom_data fields forwarded as-is, without validation
CUSTOM_DATA_PASSTHROUGH_FIELDS = ("content_name", "content_category", "content_ids", "num_items")

ACTION_SOURCE_WEBSITE = "website"


# --- Inbound Models ---
class UserData(BaseModel):
    """Raw, un-hashed identifiers as sent by the caller."""
    # zip codes and phones often arrive as JSON numbers
    model_config = ConfigDict(coerce_numbers_to_str=True)

    email: Optional[str] = Field(None, example="customer@example.com")
    phone: Optional[str] = Field(None, example="+55 11 99999-9999")
    firstName: Optional[str] = Field(None, example="Maria")
    lastName: Optional[str] = Field(None, example="Silva")
    city: Optional[str] = Field(None, example="Sao Paulo")
    state: Optional[str] = Field(None, example="SP")
    zipCode: Optional[str] = Field(None, example="01234-567")
    country: Optional[str] = Field(None, example="BR")


class CustomData(BaseModel):
    # Unknown keys are accepted (and ignored downstream) so that a payload carrying only
    # unrecognised fields still counts as "custom data was sent".
    model_config = ConfigDict(extra="allow")

    value: Optional[Any] = Field(None, example=149.90)
    currency: Optional[str] = Field(None, example="usd")
    content_name: Optional[Any] = Field(None, example="Smartphone XYZ")
    content_category: Optional[Any] = Field(None, example="Electronics")
    content_ids: Optional[Any] = Field(None, example=["prod_123"])
    num_items: Optional[Any] = Field(None, example=1)


class InboundEvent(BaseModel):
    # eventName is checked against the whitelist by the service layer so that
    # rejections carry our own error codes instead of a generic 422.
    eventName: Optional[str] = Field(None, example="Purchase")
    userData: UserData = Field(default_factory=UserData)
    customData: CustomData = Field(default_factory=CustomData)
    eventTime: Optional[int] = Field(None, example=1700000000)
    sourceUrl: Optional[str] = Field(None, example="https://shop.example.com/checkout")
    userAgent: Optional[str] = None
    clientIp: Optional[str] = None


# --- Outbound (Conversions API wire) Models ---
class OutboundEvent(BaseModel):
    event_name: EventName
    event_time: int
    action_source: str = ACTION_SOURCE_WEBSITE
    event_source_url: str
    user_data: Dict[str, Any] = Field(default_factory=dict)
    custom_data: Optional[Dict[str, Any]] = None

    def to_wire(self) -> Dict[str, Any]:
        """Serialises to the JSON shape the Conversions API expects."""
        return self.model_dump(mode="json", exclude_none=True)


# --- Response Models ---
class EventAccepted(BaseModel):
    success: bool = True
    message: str = "Event sent successfully"
    eventId: Any
    timestamp: str


class EventDescription(BaseModel):
    name: EventName
    description: str


class EventCatalog(BaseModel):
    events: List[EventDescription]


class HealthStatus(BaseModel):
    status: str = "ok"
    timestamp: str
    version: str
    uptime: float
