import pytest
from typing import List, Optional
from fastapi.testclient import TestClient

from main import app
from app.core.cache import TTLCache
from app.core.dependencies import get_import_service, get_test_case_sink
from app.models.schemas import ImportRecord
from app.repositories.interfaces.test_case_sink import ITestCaseSink
from app.services.import_service import ImportService

HIERARCHICAL_TEXT = """1. BASIC FUNCTIONALITY TEST CASES
1.1 User Authentication
TC001: Verify basic login flow with valid credentials
Open the login page and submit a valid account.
Expected Result: User is logged in and redirected to dashboard

TC002: Verify user logout
Expected Result: User is logged out and redirected to login page

1.2 User Registration
TC003: Register new user
Expected Result: User account created successfully

2. ADVANCED FEATURES
2.1 Profile Management
TC004: Update user profile picture
Expected Result: Profile picture updated and displayed correctly

TEST EXECUTION PRIORITY
P0 - Critical (Must Pass)
- TC001, TC002
P3 - Low Priority
- TC004

AUTOMATION RECOMMENDATIONS
High Priority for Automation
- Basic login flow
- User logout
"""


class FakeSink(ITestCaseSink):
    """In-memory stand-in for the persistence service"""

    def __init__(self):
        self.configured = True
        self.fail = False
        self.calls: List[tuple] = []

    async def store_test_cases(self, records: List[ImportRecord], suite_id: Optional[str]) -> Optional[int]:
        self.calls.append((records, suite_id))
        if self.fail:
            return None
        return len(records)

    def is_configured(self) -> bool:
        return self.configured


@pytest.fixture
def hierarchical_text():
    return HIERARCHICAL_TEXT


@pytest.fixture
def fake_sink():
    return FakeSink()


@pytest.fixture
def preview_cache():
    return TTLCache(max_items=16, default_ttl_seconds=60.0)


@pytest.fixture
def import_service(fake_sink, preview_cache):
    return ImportService(sink=fake_sink, preview_cache=preview_cache)


@pytest.fixture
def test_client(import_service, fake_sink):
    """Synchronous test client wired to the fake persistence sink"""
    app.dependency_overrides[get_import_service] = lambda: import_service
    app.dependency_overrides[get_test_case_sink] = lambda: fake_sink
    yield TestClient(app)
    app.dependency_overrides.clear()
