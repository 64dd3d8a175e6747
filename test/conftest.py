import pytest

from memtable.config import get_options


@pytest.fixture
def options(monkeypatch):
    """Change the configured options through the environment.

    Returns a function accepting the environment variables to set,
    the cached options are reset before and after the test.
    """

    def configure(**environ):
        for name, value in environ.items():
            monkeypatch.setenv(name, value)
        get_options.cache_clear()
        return get_options()

    yield configure
    get_options.cache_clear()
