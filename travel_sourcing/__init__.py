"""Multi-provider travel offer aggregation."""

from travel_sourcing.adapters import (
    HttpJsonAdapter,
    MockTravelAdapter,
    ProviderAdapter,
    ProviderRegistry,
    SimulatedOfferAdapter,
    StaticAdapter,
    build_fallback_registry,
    build_registry_from_settings,
)
from travel_sourcing.cache import ResultCache
from travel_sourcing.config import SourcingSettings
from travel_sourcing.deals import rank_deals
from travel_sourcing.exceptions import (
    NormalizationError,
    ProviderError,
    TravelSourcingError,
    ValidationError,
)
from travel_sourcing.links import generate_search_links
from travel_sourcing.merger import MergeGroup, fingerprint, group_offers, merge_offers
from travel_sourcing.models import (
    AggregatedResults,
    Budget,
    Deal,
    FlightOffer,
    LodgingOffer,
    ProviderQuery,
    RawProviderRecord,
    TransportOffer,
    TravelQuery,
)
from travel_sourcing.normalizers import normalize_record, normalize_records
from travel_sourcing.service import TravelAggregator

__all__ = [
    "AggregatedResults",
    "Budget",
    "Deal",
    "FlightOffer",
    "HttpJsonAdapter",
    "LodgingOffer",
    "MergeGroup",
    "MockTravelAdapter",
    "NormalizationError",
    "ProviderAdapter",
    "ProviderError",
    "ProviderQuery",
    "ProviderRegistry",
    "RawProviderRecord",
    "ResultCache",
    "SimulatedOfferAdapter",
    "SourcingSettings",
    "StaticAdapter",
    "TransportOffer",
    "TravelAggregator",
    "TravelQuery",
    "TravelSourcingError",
    "ValidationError",
    "build_fallback_registry",
    "build_registry_from_settings",
    "fingerprint",
    "generate_search_links",
    "group_offers",
    "merge_offers",
    "normalize_record",
    "normalize_records",
    "rank_deals",
]
