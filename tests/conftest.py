# tests/conftest.py

import os

# Settings are read at import time; keep background machinery off in tests.
os.environ.setdefault("DATABASE_URL_LOCAL", "sqlite://")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("SCHEDULER_ENABLED", "false")
os.environ.pop("ANTHROPIC_API_KEY", None)

from datetime import timedelta  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from campaign_service.api import deps  # noqa: E402
from campaign_service.core.exceptions import GenerationFailure  # noqa: E402
from campaign_service.db.session import get_db  # noqa: E402
from campaign_service.db.types import utcnow  # noqa: E402
from campaign_service.main import app  # noqa: E402
from campaign_service.models import Base  # noqa: E402
from campaign_service.models.campaign import Campaign  # noqa: E402
from campaign_service.models.engagement_event import EngagementEvent  # noqa: E402
from campaign_service.models.enums import CampaignStatus, EngagementEventType  # noqa: E402
from campaign_service.schemas.token import TokenPayload  # noqa: E402
from campaign_service.services import campaigns as campaign_service  # noqa: E402
from campaign_service.services.optimal_time_analyzer import OptimalTimeAnalyzer  # noqa: E402

TEST_USER_ID = "user_123"


@pytest.fixture(scope="function")
def db_session():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSessionLocal()
    yield session
    session.close()
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


def override_get_current_user():
    return TokenPayload(sub=TEST_USER_ID, email="creator@example.com")


@pytest.fixture(scope="function")
def dispatched(monkeypatch):
    """Capture Celery dispatches instead of talking to Redis."""
    calls = {"campaigns": [], "analysis": []}

    def fake_dispatch_generation(campaign_id, source, config):
        calls["campaigns"].append((campaign_id, source, config))

    def fake_dispatch_analysis(self, job):
        calls["analysis"].append(job.id)

    monkeypatch.setattr(campaign_service, "dispatch_generation", fake_dispatch_generation)
    monkeypatch.setattr(OptimalTimeAnalyzer, "dispatch", fake_dispatch_analysis)
    return calls


@pytest.fixture(scope="function")
def client(db_session, dispatched):
    """TestClient backed by the in-memory database with auth mocked."""

    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[deps.get_current_user] = override_get_current_user

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


class FakeGenerator:
    """Content generator double; platforms listed in `failing` raise."""

    def __init__(self, failing=(), fail_emails=False, fail_pages=False):
        self.failing = set(failing)
        self.fail_emails = fail_emails
        self.fail_pages = fail_pages
        self.calls = []

    async def generate_json(self, *, system_prompt, user_prompt, max_tokens=2048, temperature=0.7, max_retries=None):
        self.calls.append(user_prompt)
        first_line = user_prompt.splitlines()[0]
        if "email sequence" in first_line:
            if self.fail_emails:
                raise GenerationFailure("email generation exhausted retries")
            count = int(first_line.split()[2].split("-")[0])
            return [
                {"subject": f"Subject {i}", "preview": f"Preview {i}", "body": f"Body {i}"}
                for i in range(count)
            ]
        if "landing page" in first_line:
            if self.fail_pages:
                raise GenerationFailure("page variant generation exhausted retries")
            count = int(first_line.split()[1])
            return [
                {"approach": "urgency", "headline": f"H{i}", "subheadline": f"S{i}", "cta": "Buy"}
                for i in range(count)
            ]
        # "Create N PLATFORM posts ..."
        words = first_line.split()
        count, platform = int(words[1]), words[2]
        if platform in self.failing:
            raise GenerationFailure(f"{platform} generation exhausted retries")
        return [{"content": f"{platform} post {i} #launch"} for i in range(count)]


@pytest.fixture
def fake_generator():
    return FakeGenerator()


def make_campaign(db, user_id=TEST_USER_ID, created_at=None, status=CampaignStatus.GENERATING, **kwargs):
    campaign = Campaign(
        user_id=user_id,
        name=kwargs.pop("name", "Course Launch Campaign"),
        status=status,
        created_at=created_at or utcnow(),
        **kwargs,
    )
    db.add(campaign)
    db.commit()
    db.refresh(campaign)
    return campaign


def make_clicks(db, count, user_id=TEST_USER_ID, when=None, platform=None, event_type=EngagementEventType.CLICK):
    when = when or utcnow() - timedelta(days=1)
    db.add_all(
        [
            EngagementEvent(user_id=user_id, event_type=event_type, platform=platform, occurred_at=when)
            for _ in range(count)
        ]
    )
    db.commit()


@pytest.fixture
def campaign_factory(db_session):
    return lambda **kwargs: make_campaign(db_session, **kwargs)


@pytest.fixture
def click_factory(db_session):
    return lambda count, **kwargs: make_clicks(db_session, count, **kwargs)
