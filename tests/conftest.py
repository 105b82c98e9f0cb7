import pytest

from totphog.backend.app import create_app
from totphog.database import CredentialStore

# RFC 6238 appendix B: ASCII "12345678901234567890" in Base32
RFC_SECRET_SHA1 = "GEZDGNBVGY3TQOJQGEZDGNBVGY3TQOJQ"
TEST_SECRET = "JBSWY3DPEHPK3PXP"

# 1111111109 % 30 == 29, i.e. the last second of a step
FIXED_TIME = 1111111109


class FakeClock:
    """Callable clock whose time tests can move."""

    def __init__(self, now=FIXED_TIME):
        self.now = now

    def __call__(self):
        return self.now


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def storage_path(tmp_path):
    # nested on purpose: the store has to create var/ itself
    return tmp_path / "var" / "tokens.json"


@pytest.fixture
def store(storage_path, clock):
    return CredentialStore(str(storage_path), clock=clock)


@pytest.fixture
def app(store, storage_path):
    app = create_app({"TESTING": True, "STORAGE_PATH": str(storage_path)}, store=store)
    yield app


@pytest.fixture
def client(app):
    return app.test_client()
