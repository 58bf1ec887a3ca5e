import pytest
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, create_engine

from league.database import init_db
from league.models.achievement import Achievement
from league.schemas import TournamentCreate
from league.services import league_engine

TEST_DATABASE_URL = "sqlite:///:memory:"

# ============================================================================
# Test Database Setup
# ============================================================================
# 1. Fresh sqlite:///:memory: engine per test; StaticPool keeps one connection
#    so every session in the test sees the same database
# 2. init_db() imports every model before create_all()


@pytest.fixture(name="engine")
def engine_fixture():
    engine = create_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture(name="session")
def session_fixture(engine):
    """Provide a test database session"""
    with Session(engine) as session:
        yield session


@pytest.fixture(name="make_players")
def make_players_fixture(session: Session):
    """Factory: create players named P01, P02, ... and return them in creation order"""

    def _make(count: int, prefix: str = "P"):
        return [league_engine.create_player(session, f"{prefix}{i:02d}") for i in range(1, count + 1)]

    return _make


@pytest.fixture(name="make_tournament")
def make_tournament_fixture(session: Session):
    def _make(players, **overrides):
        fields = {"name": "Spring League", "player_ids": [p.id for p in players]}
        fields.update(overrides)
        return league_engine.create_tournament(session, TournamentCreate(**fields))

    return _make


@pytest.fixture(name="selectable_achievement")
def selectable_achievement_fixture(session: Session) -> Achievement:
    achievement = Achievement(name="First Blood", points=2, always_on=False)
    session.add(achievement)
    session.commit()
    session.refresh(achievement)
    return achievement

