"""Typed models for the travel offer aggregation pipeline."""

from __future__ import annotations

from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Annotated, Any, Dict, FrozenSet, Literal, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

OfferKind = Literal["flight", "lodging", "transport", "experience"]
QueryKind = Literal["flight", "lodging", "transport", "experience", "all"]
ProviderStatus = Literal[
    "ok", "empty", "error", "timeout", "rate_limited", "exhausted", "unauthorized"
]
DealReason = Literal["lowest_price", "best_value", "promotional_offer"]
SpecialOfferType = Literal["first-time", "discount", "package", "loyalty"]

OFFER_KINDS: tuple = ("flight", "lodging", "transport", "experience")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _strip_or_none(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    cleaned = str(value).strip()
    return cleaned or None


class Budget(BaseModel):
    min: Optional[Decimal] = Field(None, ge=0)
    max: Optional[Decimal] = Field(None, ge=0)
    currency: str = "USD"

    @field_validator("currency", mode="before")
    @classmethod
    def _upper_currency(cls, value: Optional[str]) -> str:
        return (str(value).strip() if value else "USD").upper()


class TravelQuery(BaseModel):
    """A single user search intent. Invariants are checked by the aggregator."""

    kind: QueryKind = "all"
    origin: Optional[str] = None
    destination: str = ""
    date_out: Optional[date] = None
    date_return: Optional[date] = None
    party_size: int = Field(1, ge=1)
    flexible_dates: bool = False
    budget: Optional[Budget] = None

    @field_validator("origin", mode="before")
    @classmethod
    def _clean_origin(cls, value: Optional[str]) -> Optional[str]:
        return _strip_or_none(value)

    @field_validator("destination", mode="before")
    @classmethod
    def _clean_destination(cls, value: Optional[str]) -> str:
        return _strip_or_none(value) or ""

    @property
    def currency(self) -> Optional[str]:
        return self.budget.currency if self.budget else None


class ProviderQuery(BaseModel):
    """The slice of a TravelQuery an adapter needs for one offer kind."""

    kind: OfferKind
    origin: Optional[str] = None
    destination: str
    date_out: Optional[date] = None
    date_return: Optional[date] = None
    party_size: int = 1
    flexible_dates: bool = False
    currency: str = "USD"
    min_price: Optional[Decimal] = None
    max_price: Optional[Decimal] = None

    def to_params(self) -> Dict[str, str]:
        """Flatten into string query parameters, dropping empty values."""
        params: Dict[str, str] = {}
        for key, value in self.model_dump(mode="json").items():
            if value is None or value == "":
                continue
            if isinstance(value, bool):
                value = "true" if value else "false"
            params[key] = str(value)
        return params


class RawProviderRecord(BaseModel):
    """Provider-shaped payload plus the adapter's source tag and declared kind."""

    source: str
    kind: str
    payload: Dict[str, Any] = Field(default_factory=dict)


class Price(BaseModel):
    model_config = ConfigDict(frozen=True)

    amount: Decimal = Field(Decimal("0"), ge=0)
    currency: str = "USD"


class FlightSegment(BaseModel):
    model_config = ConfigDict(frozen=True)

    origin: str = ""
    destination: str = ""
    carrier: str = ""
    flight_number: str = ""
    departure: Optional[datetime] = None
    arrival: Optional[datetime] = None
    duration_minutes: int = Field(0, ge=0)


class Location(BaseModel):
    model_config = ConfigDict(frozen=True)

    address: str = ""
    city: str = ""
    country: str = ""


class Rating(BaseModel):
    model_config = ConfigDict(frozen=True)

    value: float = Field(0.0, ge=0, le=5)
    review_count: int = Field(0, ge=0)


class SpecialOffer(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: SpecialOfferType
    description: str
    discount: Optional[float] = None


class _OfferBase(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    price: Price
    source: str
    booking_url: str = "#"
    last_updated: datetime = Field(default_factory=utcnow)
    original_price: Optional[Price] = None
    discount_percent: Optional[int] = Field(None, ge=0, le=100)


class FlightOffer(_OfferBase):
    kind: Literal["flight"] = "flight"
    segments: Tuple[FlightSegment, ...] = Field(..., min_length=1)
    total_duration_minutes: int = Field(0, ge=0)
    layovers: int = Field(0, ge=0)
    refundable: bool = False
    baggage_included: bool = False


class LodgingOffer(_OfferBase):
    kind: Literal["lodging"] = "lodging"
    name: str = ""
    location: Location = Field(default_factory=Location)
    rating: Rating = Field(default_factory=Rating)
    amenities: FrozenSet[str] = frozenset()
    special_offers: Tuple[SpecialOffer, ...] = ()
    cancellation_policy: str = "Check booking site"
    images: Tuple[str, ...] = ()

    def has_first_time_offer(self) -> bool:
        return any(offer.type == "first-time" for offer in self.special_offers)


class TransportOffer(_OfferBase):
    """Ground transport leg or bookable experience."""

    kind: Literal["transport", "experience"] = "transport"
    name: str = ""
    operator: str = ""
    category: str = ""
    origin: str = ""
    destination: str = ""
    departure: Optional[datetime] = None
    arrival: Optional[datetime] = None
    duration_minutes: int = Field(0, ge=0)


NormalizedOffer = Annotated[
    Union[FlightOffer, LodgingOffer, TransportOffer], Field(discriminator="kind")
]


class Deal(BaseModel):
    model_config = ConfigDict(frozen=True)

    category: OfferKind
    offer: NormalizedOffer
    reason: DealReason
    reason_text: str
    discount_percent: Optional[int] = Field(None, ge=0, le=100)


class ProviderStatusSnapshot(BaseModel):
    model_config = ConfigDict(frozen=True)

    provider_id: str
    kind: Optional[OfferKind] = None
    status: ProviderStatus
    result_count: int = 0
    latency_ms: Optional[int] = None
    message: Optional[str] = None


class SearchLink(BaseModel):
    model_config = ConfigDict(frozen=True)

    provider: str
    url: str


class AggregatedResults(BaseModel):
    """
    Immutable snapshot handed to the caller of TravelAggregator.search().

    Collections are tuples and every nested model is frozen, so the object a
    caller receives is the same one the cache keeps serving.
    """

    model_config = ConfigDict(frozen=True)

    flights: Tuple[FlightOffer, ...] = ()
    lodgings: Tuple[LodgingOffer, ...] = ()
    transport: Tuple[TransportOffer, ...] = ()
    experiences: Tuple[TransportOffer, ...] = ()
    deals: Tuple[Deal, ...] = ()
    sources_queried: FrozenSet[str] = frozenset()
    provider_statuses: Tuple[ProviderStatusSnapshot, ...] = ()
    fallback_links: Tuple[SearchLink, ...] = ()
    generated_at: datetime = Field(default_factory=utcnow)

    def is_empty(self) -> bool:
        return not (self.flights or self.lodgings or self.transport or self.experiences)

    def offer_count(self) -> int:
        return len(self.flights) + len(self.lodgings) + len(self.transport) + len(self.experiences)

    def provider_summary(self) -> Dict[str, ProviderStatusSnapshot]:
        return {status.provider_id: status for status in self.provider_statuses}
