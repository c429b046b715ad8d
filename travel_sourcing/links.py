"""Manual comparison-site links offered when no provider returned data."""

from typing import List
from urllib.parse import quote, urlencode

from travel_sourcing.models import SearchLink, TravelQuery


def _flight_links(query: TravelQuery) -> List[SearchLink]:
    dest = quote(query.destination)
    when = f"%20on%20{query.date_out.isoformat()}" if query.date_out else ""
    origin = f"%20from%20{quote(query.origin)}" if query.origin else ""
    return [
        SearchLink(provider="Skyscanner", url=f"https://www.skyscanner.com/transport/flights/{dest}/"),
        SearchLink(
            provider="Google Flights",
            url=f"https://www.google.com/travel/flights?q=Flights%20to%20{dest}{origin}{when}",
        ),
        SearchLink(provider="Kayak", url=f"https://www.kayak.com/flights/{dest}"),
    ]


def _lodging_links(query: TravelQuery) -> List[SearchLink]:
    params = {"ss": query.destination}
    if query.date_out:
        params["checkin"] = query.date_out.isoformat()
    if query.date_return:
        params["checkout"] = query.date_return.isoformat()
    return [
        SearchLink(provider="Booking.com", url=f"https://www.booking.com/searchresults.html?{urlencode(params)}"),
        SearchLink(provider="Agoda", url=f"https://www.agoda.com/search?{urlencode({'city': query.destination})}"),
        SearchLink(
            provider="Expedia",
            url=f"https://www.expedia.com/Hotel-Search?{urlencode({'destination': query.destination})}",
        ),
    ]


def _transport_links(query: TravelQuery) -> List[SearchLink]:
    dest = quote(query.destination)
    origin = quote(query.origin) if query.origin else ""
    path = f"{origin}/{dest}" if origin else dest
    return [
        SearchLink(provider="Rome2Rio", url=f"https://www.rome2rio.com/map/{path}"),
        SearchLink(provider="Omio", url=f"https://www.omio.com/search?{urlencode({'destination': query.destination})}"),
    ]


def _experience_links(query: TravelQuery) -> List[SearchLink]:
    return [
        SearchLink(provider="GetYourGuide", url=f"https://www.getyourguide.com/s/?{urlencode({'q': query.destination})}"),
        SearchLink(provider="Viator", url=f"https://www.viator.com/searchResults/all?{urlencode({'text': query.destination})}"),
    ]


_BUILDERS = {
    "flight": _flight_links,
    "lodging": _lodging_links,
    "transport": _transport_links,
    "experience": _experience_links,
}


def generate_search_links(query: TravelQuery) -> List[SearchLink]:
    """Comparison-site search links for the query's offer kinds."""
    if not query.destination:
        return []
    kinds = list(_BUILDERS) if query.kind == "all" else [query.kind]
    links: List[SearchLink] = []
    for kind in kinds:
        links.extend(_BUILDERS[kind](query))
    return links
