"""Shared builders and fakes for engine tests."""

import pytest

from atlas.models import Organization, Place, Product


def org(entity_id, location, name=None):
    return Organization(id=entity_id, name=name or f"Org {entity_id}", location=location)


def product(entity_id, origin_country, name=None):
    return Product(id=entity_id, name=name or f"Product {entity_id}", origin_country=origin_country)


def place(entity_id, country, city=None, lat=None, lng=None, name=None, area_hectares=None):
    return Place(
        id=entity_id,
        name=name or f"Place {entity_id}",
        country=country,
        city=city,
        latitude=lat,
        longitude=lng,
        area_hectares=area_hectares,
    )


class FakeTimer:
    """Stands in for threading.Timer; fires only when the test says so."""

    def __init__(self, interval, function, args=None, kwargs=None):
        self.interval = interval
        self.function = function
        self.args = args or ()
        self.kwargs = kwargs or {}
        self.started = False
        self.cancelled = False
        self.daemon = False

    def start(self):
        self.started = True

    def cancel(self):
        self.cancelled = True

    def fire(self):
        if not self.cancelled:
            self.function(*self.args, **self.kwargs)


class TimerFactory:
    def __init__(self):
        self.timers = []

    def __call__(self, interval, function, args=None, kwargs=None):
        timer = FakeTimer(interval, function, args=args, kwargs=kwargs)
        self.timers.append(timer)
        return timer

    @property
    def last(self):
        return self.timers[-1]


class FakeClock:
    def __init__(self, now=100.0):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


class RecordingSink:
    def __init__(self, search_id=None, fail=False):
        self.search_id = search_id
        self.fail = fail
        self.searches = []
        self.clicks = []

    def record_search(self, event):
        if self.fail:
            raise RuntimeError("analytics down")
        self.searches.append(event)
        return self.search_id

    def record_click(self, event):
        if self.fail:
            raise RuntimeError("analytics down")
        self.clicks.append(event)


@pytest.fixture
def timer_factory():
    return TimerFactory()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def sink():
    return RecordingSink()


@pytest.fixture
def mixed_entities():
    return {
        "organizations": [
            org("o1", "Paris, FR"),
            org("o2", "Lyon, France"),
            org("o3", "Berlin, DE"),
            org("o4", "Munich, Germany"),
            org("o5", "Germany"),
            org("o6", None),
        ],
        "products": [
            product("p1", "FR", name="Hemp Oil"),
            product("p2", "", name="Mystery Seeds"),
        ],
        "places": [
            place("pl1", "France", "Paris", 48.85, 2.35, name="Paris Hemp Farm", area_hectares=50),
            place("pl2", "NL", None, 52.1, 5.3, name="Dutch Field"),
        ],
    }
