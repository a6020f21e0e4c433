import pytest

from hotelmatch.config import MatchConfig
from hotelmatch.service import MappingService
from hotelmatch.store import SqliteMappingStore


@pytest.fixture
def store():
    s = SqliteMappingStore(":memory:")
    s.init_schema()
    yield s
    s.close()


@pytest.fixture
def service(store):
    return MappingService(store, MatchConfig())


@pytest.fixture
def marais_master(service):
    return service.import_master_record({
        "hotel_name": "Hotel Le Marais",
        "address_line1": "12 Rue de Bretagne",
        "city": "Paris",
        "country_code": "FR",
        "postal_code": "75003",
        "latitude": 48.8625,
        "longitude": 2.3620,
        "phone_number": "+33 1 42 72 00 00",
    })
