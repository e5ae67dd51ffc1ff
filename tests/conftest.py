import pytest
from strconv.cache import Cache
from strconv.config import ConversionOptions


@pytest.fixture(autouse=True)
def clear_caches():
    """Clear caches and options before and after each test to ensure test isolation."""
    Cache.get_instance().clear_all()
    ConversionOptions.set_instance(ConversionOptions())
    yield
    Cache.get_instance().clear_all()
    ConversionOptions.reset()


pytest_plugins = [
    'tests.fixtures.values',
    'tests.fixtures.sqlite',
]
