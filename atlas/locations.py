from __future__ import annotations

from typing import Final

from atlas.models import Coordinate

OTHER_CITY: Final[str] = "Other"
UNKNOWN_COORDINATE: Final[Coordinate] = Coordinate(0.0, 0.0)

UNITED_STATES: Final[str] = "United States of America"
UNITED_KINGDOM: Final[str] = "United Kingdom"

COUNTRY_CODES: Final[dict[str, str]] = {
    "FR": "France",
    "FRA": "France",
    "DE": "Germany",
    "DEU": "Germany",
    "ES": "Spain",
    "ESP": "Spain",
    "IT": "Italy",
    "ITA": "Italy",
    "UK": UNITED_KINGDOM,
    "GB": UNITED_KINGDOM,
    "GBR": UNITED_KINGDOM,
    "US": UNITED_STATES,
    "USA": UNITED_STATES,
    "CA": "Canada",
    "CAN": "Canada",
    "BR": "Brazil",
    "BRA": "Brazil",
    "MX": "Mexico",
    "MEX": "Mexico",
    "AR": "Argentina",
    "ARG": "Argentina",
    "CL": "Chile",
    "CHL": "Chile",
    "CO": "Colombia",
    "COL": "Colombia",
    "PE": "Peru",
    "PER": "Peru",
    "VE": "Venezuela",
    "VEN": "Venezuela",
    "UY": "Uruguay",
    "EC": "Ecuador",
    "NL": "Netherlands",
    "NLD": "Netherlands",
    "BE": "Belgium",
    "BEL": "Belgium",
    "CH": "Switzerland",
    "CHE": "Switzerland",
    "AT": "Austria",
    "AUT": "Austria",
    "SE": "Sweden",
    "SWE": "Sweden",
    "NO": "Norway",
    "NOR": "Norway",
    "DK": "Denmark",
    "DNK": "Denmark",
    "FI": "Finland",
    "FIN": "Finland",
    "PL": "Poland",
    "POL": "Poland",
    "CZ": "Czech Republic",
    "CZE": "Czech Republic",
    "HU": "Hungary",
    "HUN": "Hungary",
    "RO": "Romania",
    "ROU": "Romania",
    "GR": "Greece",
    "GRC": "Greece",
    "PT": "Portugal",
    "PRT": "Portugal",
    "IE": "Ireland",
    "IRL": "Ireland",
    "JP": "Japan",
    "JPN": "Japan",
    "CN": "China",
    "CHN": "China",
    "IN": "India",
    "IND": "India",
    "AU": "Australia",
    "AUS": "Australia",
    "NZ": "New Zealand",
    "NZL": "New Zealand",
    "ZA": "South Africa",
    "ZAF": "South Africa",
    "EG": "Egypt",
    "EGY": "Egypt",
    "MA": "Morocco",
    "MAR": "Morocco",
    "KE": "Kenya",
    "KEN": "Kenya",
    "NG": "Nigeria",
    "NGA": "Nigeria",
    "TH": "Thailand",
    "THA": "Thailand",
    "VN": "Vietnam",
    "VNM": "Vietnam",
    "PH": "Philippines",
    "PHL": "Philippines",
    "ID": "Indonesia",
    "IDN": "Indonesia",
    "MY": "Malaysia",
    "MYS": "Malaysia",
    "SG": "Singapore",
    "SGP": "Singapore",
    "KR": "South Korea",
    "KOR": "South Korea",
    "TW": "Taiwan",
    "TWN": "Taiwan",
    "HK": "Hong Kong",
    "IL": "Israel",
    "ISR": "Israel",
    "AE": "United Arab Emirates",
    "ARE": "United Arab Emirates",
    "UAE": "United Arab Emirates",
    "SA": "Saudi Arabia",
    "SAU": "Saudi Arabia",
    "TR": "Turkey",
    "TUR": "Turkey",
    "RU": "Russia",
    "RUS": "Russia",
    "UA": "Ukraine",
    "UKR": "Ukraine",
}

COUNTRY_ALIASES: Final[dict[str, str]] = {
    "united states": UNITED_STATES,
    "united states of america": UNITED_STATES,
    "u.s.a.": UNITED_STATES,
    "eeuu": UNITED_STATES,
    "great britain": UNITED_KINGDOM,
    "england": UNITED_KINGDOM,
    "scotland": UNITED_KINGDOM,
    "deutschland": "Germany",
    "españa": "Spain",
    "méxico": "Mexico",
    "czechia": "Czech Republic",
    "the netherlands": "Netherlands",
    "holland": "Netherlands",
    "republic of korea": "South Korea",
    "the philippines": "Philippines",
}

CAPITAL_COORDINATES: Final[dict[str, Coordinate]] = {
    UNITED_STATES: Coordinate(38.9072, -77.0369),
    "Canada": Coordinate(45.4215, -75.6972),
    "Mexico": Coordinate(19.4326, -99.1332),
    "Brazil": Coordinate(-15.7975, -47.8919),
    "Argentina": Coordinate(-34.6037, -58.3816),
    "Chile": Coordinate(-33.4489, -70.6693),
    "Colombia": Coordinate(4.7110, -74.0721),
    "Peru": Coordinate(-12.0464, -77.0428),
    "Venezuela": Coordinate(10.4806, -66.9036),
    "Uruguay": Coordinate(-34.9011, -56.1645),
    "Ecuador": Coordinate(-0.1807, -78.4678),
    "France": Coordinate(48.8566, 2.3522),
    "Germany": Coordinate(52.5200, 13.4050),
    "Spain": Coordinate(40.4168, -3.7038),
    "Italy": Coordinate(41.9028, 12.4964),
    UNITED_KINGDOM: Coordinate(51.5074, -0.1278),
    "Netherlands": Coordinate(52.3676, 4.9041),
    "Belgium": Coordinate(50.8503, 4.3517),
    "Switzerland": Coordinate(46.9480, 7.4474),
    "Austria": Coordinate(48.2082, 16.3738),
    "Sweden": Coordinate(59.3293, 18.0686),
    "Norway": Coordinate(59.9139, 10.7522),
    "Denmark": Coordinate(55.6761, 12.5683),
    "Finland": Coordinate(60.1695, 24.9354),
    "Poland": Coordinate(52.2297, 21.0122),
    "Czech Republic": Coordinate(50.0755, 14.4378),
    "Hungary": Coordinate(47.4979, 19.0402),
    "Romania": Coordinate(44.4268, 26.1025),
    "Greece": Coordinate(37.9838, 23.7275),
    "Portugal": Coordinate(38.7223, -9.1393),
    "Ireland": Coordinate(53.3498, -6.2603),
    "Russia": Coordinate(55.7558, 37.6173),
    "Ukraine": Coordinate(50.4501, 30.5234),
    "Turkey": Coordinate(39.9334, 32.8597),
    "Japan": Coordinate(35.6762, 139.6503),
    "China": Coordinate(39.9042, 116.4074),
    "India": Coordinate(28.6139, 77.2090),
    "South Korea": Coordinate(37.5665, 126.9780),
    "Thailand": Coordinate(13.7563, 100.5018),
    "Vietnam": Coordinate(21.0285, 105.8542),
    "Philippines": Coordinate(14.5995, 120.9842),
    "Indonesia": Coordinate(-6.2088, 106.8456),
    "Malaysia": Coordinate(3.1390, 101.6869),
    "Singapore": Coordinate(1.3521, 103.8198),
    "Taiwan": Coordinate(25.0330, 121.5654),
    "Hong Kong": Coordinate(22.3193, 114.1694),
    "Israel": Coordinate(31.7683, 35.2137),
    "United Arab Emirates": Coordinate(24.4539, 54.3773),
    "Saudi Arabia": Coordinate(24.7136, 46.6753),
    "South Africa": Coordinate(-25.7479, 28.2293),
    "Egypt": Coordinate(30.0444, 31.2357),
    "Morocco": Coordinate(33.9716, -6.8498),
    "Kenya": Coordinate(-1.2864, 36.8172),
    "Nigeria": Coordinate(9.0765, 7.3986),
    "Australia": Coordinate(-35.2809, 149.1300),
    "New Zealand": Coordinate(-41.2865, 174.7762),
}

# Geographic centroids; camera targets for country focus.
COUNTRY_CENTROIDS: Final[dict[str, Coordinate]] = {
    UNITED_STATES: Coordinate(37.0902, -95.7129),
    "Canada": Coordinate(56.1304, -106.3468),
    "Mexico": Coordinate(23.6345, -102.5528),
    "Brazil": Coordinate(-14.2350, -51.9253),
    "Argentina": Coordinate(-38.4161, -63.6167),
    "Chile": Coordinate(-35.6751, -71.5430),
    "Colombia": Coordinate(4.5709, -74.2973),
    "Peru": Coordinate(-9.1900, -75.0152),
    "Venezuela": Coordinate(6.4238, -66.5897),
    "Uruguay": Coordinate(-32.5228, -55.7658),
    "Ecuador": Coordinate(-1.8312, -78.1834),
    "France": Coordinate(46.2276, 2.2137),
    "Germany": Coordinate(51.1657, 10.4515),
    "Spain": Coordinate(40.4637, -3.7492),
    "Italy": Coordinate(41.8719, 12.5674),
    UNITED_KINGDOM: Coordinate(55.3781, -3.4360),
    "Netherlands": Coordinate(52.1326, 5.2913),
    "Belgium": Coordinate(50.5039, 4.4699),
    "Switzerland": Coordinate(46.8182, 8.2275),
    "Austria": Coordinate(47.5162, 14.5501),
    "Sweden": Coordinate(60.1282, 18.6435),
    "Norway": Coordinate(60.4720, 8.4689),
    "Denmark": Coordinate(56.2639, 9.5018),
    "Czech Republic": Coordinate(49.8175, 15.4730),
    "Romania": Coordinate(45.9432, 24.9668),
    "Greece": Coordinate(39.0742, 21.8243),
    "Portugal": Coordinate(39.3999, -8.2245),
    "Ireland": Coordinate(53.4129, -8.2439),
    "Turkey": Coordinate(38.9637, 35.2433),
    "Japan": Coordinate(36.2048, 138.2529),
    "China": Coordinate(35.8617, 104.1954),
    "India": Coordinate(20.5937, 78.9629),
    "South Korea": Coordinate(35.9078, 127.7669),
    "Thailand": Coordinate(15.8700, 100.9925),
    "Philippines": Coordinate(12.8797, 121.7740),
    "Malaysia": Coordinate(4.2105, 101.9758),
    "Taiwan": Coordinate(23.6978, 120.9605),
    "United Arab Emirates": Coordinate(23.4241, 53.8478),
    "South Africa": Coordinate(-30.5595, 22.9375),
    "Egypt": Coordinate(26.8206, 30.8025),
    "Australia": Coordinate(-25.2744, 133.7751),
}

CITY_COORDINATES: Final[dict[tuple[str, str], Coordinate]] = {
    ("Paris", "France"): Coordinate(48.8566, 2.3522),
    ("Lyon", "France"): Coordinate(45.7640, 4.8357),
    ("Marseille", "France"): Coordinate(43.2965, 5.3698),
    ("Berlin", "Germany"): Coordinate(52.5200, 13.4050),
    ("Munich", "Germany"): Coordinate(48.1351, 11.5820),
    ("Hamburg", "Germany"): Coordinate(53.5511, 9.9937),
    ("New York", UNITED_STATES): Coordinate(40.7128, -74.0060),
    ("Los Angeles", UNITED_STATES): Coordinate(34.0522, -118.2437),
    ("Chicago", UNITED_STATES): Coordinate(41.8781, -87.6298),
    ("San Francisco", UNITED_STATES): Coordinate(37.7749, -122.4194),
    ("Seattle", UNITED_STATES): Coordinate(47.6062, -122.3321),
    ("Denver", UNITED_STATES): Coordinate(39.7392, -104.9903),
    ("Austin", UNITED_STATES): Coordinate(30.2672, -97.7431),
    ("Portland", UNITED_STATES): Coordinate(45.5152, -122.6784),
    ("Boston", UNITED_STATES): Coordinate(42.3601, -71.0589),
    ("Miami", UNITED_STATES): Coordinate(25.7617, -80.1918),
    ("Toronto", "Canada"): Coordinate(43.6532, -79.3832),
    ("Vancouver", "Canada"): Coordinate(49.2827, -123.1207),
    ("Montreal", "Canada"): Coordinate(45.5017, -73.5673),
    ("London", UNITED_KINGDOM): Coordinate(51.5074, -0.1278),
    ("Manchester", UNITED_KINGDOM): Coordinate(53.4808, -2.2426),
    ("Edinburgh", UNITED_KINGDOM): Coordinate(55.9533, -3.1883),
    ("Barcelona", "Spain"): Coordinate(41.3874, 2.1686),
    ("Madrid", "Spain"): Coordinate(40.4168, -3.7038),
    ("Valencia", "Spain"): Coordinate(39.4699, -0.3763),
    ("Amsterdam", "Netherlands"): Coordinate(52.3676, 4.9041),
    ("Rotterdam", "Netherlands"): Coordinate(51.9244, 4.4777),
    ("Rome", "Italy"): Coordinate(41.9028, 12.4964),
    ("Milan", "Italy"): Coordinate(45.4642, 9.1900),
    ("Turin", "Italy"): Coordinate(45.0703, 7.6869),
    ("Vienna", "Austria"): Coordinate(48.2082, 16.3738),
    ("Prague", "Czech Republic"): Coordinate(50.0755, 14.4378),
    ("Warsaw", "Poland"): Coordinate(52.2297, 21.0122),
    ("Brussels", "Belgium"): Coordinate(50.8503, 4.3517),
    ("Copenhagen", "Denmark"): Coordinate(55.6761, 12.5683),
    ("Stockholm", "Sweden"): Coordinate(59.3293, 18.0686),
    ("Oslo", "Norway"): Coordinate(59.9139, 10.7522),
    ("Helsinki", "Finland"): Coordinate(60.1699, 24.9384),
    ("Athens", "Greece"): Coordinate(37.9838, 23.7275),
    ("Lisbon", "Portugal"): Coordinate(38.7223, -9.1393),
    ("Porto", "Portugal"): Coordinate(41.1579, -8.6291),
    ("Dublin", "Ireland"): Coordinate(53.3498, -6.2603),
    ("Zurich", "Switzerland"): Coordinate(47.3769, 8.5417),
    ("Geneva", "Switzerland"): Coordinate(46.2044, 6.1432),
    ("Budapest", "Hungary"): Coordinate(47.4979, 19.0402),
    ("Bucharest", "Romania"): Coordinate(44.4268, 26.1025),
    ("Kyiv", "Ukraine"): Coordinate(50.4501, 30.5234),
    ("Istanbul", "Turkey"): Coordinate(41.0082, 28.9784),
    ("Bangkok", "Thailand"): Coordinate(13.7563, 100.5018),
    ("Chiang Mai", "Thailand"): Coordinate(18.7883, 98.9853),
    ("Phuket", "Thailand"): Coordinate(7.8804, 98.3923),
    ("Tokyo", "Japan"): Coordinate(35.6762, 139.6503),
    ("Osaka", "Japan"): Coordinate(34.6937, 135.5023),
    ("Singapore", "Singapore"): Coordinate(1.3521, 103.8198),
    ("Hong Kong", "Hong Kong"): Coordinate(22.3193, 114.1694),
    ("Hong Kong", "China"): Coordinate(22.3193, 114.1694),
    ("Seoul", "South Korea"): Coordinate(37.5665, 126.9780),
    ("Mumbai", "India"): Coordinate(19.0760, 72.8777),
    ("Delhi", "India"): Coordinate(28.7041, 77.1025),
    ("Bangalore", "India"): Coordinate(12.9716, 77.5946),
    ("Shanghai", "China"): Coordinate(31.2304, 121.4737),
    ("Beijing", "China"): Coordinate(39.9042, 116.4074),
    ("Manila", "Philippines"): Coordinate(14.5995, 120.9842),
    ("Jakarta", "Indonesia"): Coordinate(-6.2088, 106.8456),
    ("Kuala Lumpur", "Malaysia"): Coordinate(3.1390, 101.6869),
    ("Ho Chi Minh City", "Vietnam"): Coordinate(10.8231, 106.6297),
    ("Hanoi", "Vietnam"): Coordinate(21.0285, 105.8542),
    ("Taipei", "Taiwan"): Coordinate(25.0330, 121.5654),
    ("Sydney", "Australia"): Coordinate(-33.8688, 151.2093),
    ("Melbourne", "Australia"): Coordinate(-37.8136, 144.9631),
    ("Brisbane", "Australia"): Coordinate(-27.4698, 153.0251),
    ("Auckland", "New Zealand"): Coordinate(-36.8485, 174.7633),
    ("São Paulo", "Brazil"): Coordinate(-23.5505, -46.6333),
    ("Rio de Janeiro", "Brazil"): Coordinate(-22.9068, -43.1729),
    ("Buenos Aires", "Argentina"): Coordinate(-34.6037, -58.3816),
    ("Lima", "Peru"): Coordinate(-12.0464, -77.0428),
    ("Bogotá", "Colombia"): Coordinate(4.7110, -74.0721),
    ("Santiago", "Chile"): Coordinate(-33.4489, -70.6693),
    ("Mexico City", "Mexico"): Coordinate(19.4326, -99.1332),
    ("Dubai", "United Arab Emirates"): Coordinate(25.2048, 55.2708),
    ("Tel Aviv", "Israel"): Coordinate(32.0853, 34.7818),
    ("Cairo", "Egypt"): Coordinate(30.0444, 31.2357),
    ("Johannesburg", "South Africa"): Coordinate(-26.2041, 28.0473),
    ("Cape Town", "South Africa"): Coordinate(-33.9249, 18.4241),
    ("Nairobi", "Kenya"): Coordinate(-1.2864, 36.8172),
}

_CITY_INDEX: Final[dict[tuple[str, str], Coordinate]] = {
    (city.casefold(), country): coordinate for (city, country), coordinate in CITY_COORDINATES.items()
}


def normalize_country(raw: str | None) -> str:
    if raw is None:
        return ""

    cleaned = raw.strip()
    if not cleaned:
        return ""

    upper = cleaned.upper()
    if upper in COUNTRY_CODES:
        return COUNTRY_CODES[upper]

    lowered = cleaned.casefold()
    if lowered in COUNTRY_ALIASES:
        return COUNTRY_ALIASES[lowered]

    return cleaned


def capital_of(country: str) -> Coordinate:
    return CAPITAL_COORDINATES.get(normalize_country(country), UNKNOWN_COORDINATE)


def country_centroid(country: str) -> Coordinate:
    canonical = normalize_country(country)
    if canonical in COUNTRY_CENTROIDS:
        return COUNTRY_CENTROIDS[canonical]
    return capital_of(canonical)


def resolve_city_coordinate(city: str | None, country: str) -> Coordinate:
    canonical = normalize_country(country)
    if city and city != OTHER_CITY:
        coordinate = _CITY_INDEX.get((city.strip().casefold(), canonical))
        if coordinate is not None:
            return coordinate
    return capital_of(canonical)


def parse_location(text: str | None) -> tuple[str, str] | None:
    """Split free text like "Paris, FR" into (city, canonical country).

    The first segment is the city and the last one the country; a single
    segment is a country without city granularity.
    """
    if not text:
        return None

    parts = [part.strip() for part in text.split(",")]
    parts = [part for part in parts if part]
    if not parts:
        return None

    country = normalize_country(parts[-1])
    if len(parts) == 1:
        return OTHER_CITY, country
    return parts[0], country
