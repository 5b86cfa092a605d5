import pytest

from landed_cost.services.rate_resolver import RateResolver

from .factories import make_config, make_item, make_store


@pytest.fixture
def store():
    return make_store()


@pytest.fixture
def resolver(store):
    return RateResolver(store)


@pytest.fixture
def config():
    return make_config()


@pytest.fixture
def item():
    return make_item()
