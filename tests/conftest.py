import pytest
import structlog
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, Session, select

from app.api.v1.dependencies import get_rate_limit_store
from app.core.rate_limit import InMemoryRateLimitStore
from app.db.models.games import Game
from app.db.models.rolls import Roll
from app.db.repositories.games import GameRepository
from app.db.repositories.rolls import RollRepository
from app.db.session import build_engine, get_session
from app.features.games.services import GameService
from app.features.leaderboard.services import LeaderboardService
from app.main import create_app


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Prevent context leaking between tests."""
    structlog.contextvars.clear_contextvars()
    yield
    structlog.contextvars.clear_contextvars()


@pytest.fixture()
def engine():
    # une seule connexion partagée : la base en mémoire survit entre sessions
    test_engine = build_engine("sqlite://", poolclass=StaticPool)
    SQLModel.metadata.create_all(test_engine)
    yield test_engine
    SQLModel.metadata.drop_all(test_engine)
    test_engine.dispose()


@pytest.fixture()
def session(engine):
    with Session(engine) as db_session:
        yield db_session


@pytest.fixture()
def game_service(session):
    return GameService(session, GameRepository(session), RollRepository(session))


@pytest.fixture()
def leaderboard_service(session):
    return LeaderboardService(game_repo=GameRepository(session), roll_repo=RollRepository(session))


@pytest.fixture()
def rate_limit_store():
    return InMemoryRateLimitStore()


@pytest.fixture()
def api_app(engine, rate_limit_store):
    application = create_app(with_lifespan=False)

    def _get_test_session():
        with Session(engine) as db_session:
            yield db_session

    application.dependency_overrides[get_session] = _get_test_session
    application.dependency_overrides[get_rate_limit_store] = lambda: rate_limit_store
    yield application
    application.dependency_overrides.clear()


@pytest.fixture()
def client(api_app):
    return TestClient(api_app)


@pytest.fixture()
def play_game(game_service):
    """Crée une partie et joue les paires données ; finish optionnel."""

    def _play(pairs, *, finish=False, player_name=None):
        game = game_service.create_game()
        for die_a, die_b in pairs:
            game_service.record_roll(game.id, die_a, die_b)
        if finish:
            game_service.finish_game(game.id, player_name=player_name)
        return game_service.get_game(game.id)

    return _play


@pytest.fixture()
def check_invariants(session):
    """Vérifie les invariants Game/Roll directement en base."""

    def _check(game_id):
        session.expire_all()
        game = session.get(Game, game_id)
        rolls = session.exec(select(Roll).where(Roll.game_id == game_id).order_by(Roll.roll_index)).all()
        assert game.roll_count == len(rolls)
        assert game.total_score == sum(r.sum for r in rolls)
        assert [r.roll_index for r in rolls] == list(range(game.roll_count))
        assert all(r.sum == r.die_a + r.die_b for r in rolls)
        assert game.roll_count <= 10
        return game, rolls

    return _check


class RacingGameRepository(GameRepository):
    """
    Simule un lancer concurrent passé entre la lecture de la partie et l'écriture du nôtre.

    lost_updates : le compare-and-set des compteurs échoue (roll_count a déjà bougé).
    taken_indices : un autre Roll occupe déjà l'index lu (contrainte unique (game_id, roll_index)).
    """

    def __init__(self, session, *, lost_updates=0, taken_indices=0):
        super().__init__(session)
        self.lost_updates = lost_updates
        self.taken_indices = taken_indices

    def get_for_update(self, game_id):
        game = super().get_for_update(game_id)
        if game is not None and self.taken_indices > 0:
            self.taken_indices -= 1
            RollRepository(self.session).create(
                commit=False, game_id=game_id, roll_index=game.roll_count, die_a=1, die_b=1, sum=2
            )
        return game

    def increment_counters(self, game_id, *, expected_roll_count, points):
        if self.lost_updates > 0:
            self.lost_updates -= 1
            return False
        return super().increment_counters(game_id, expected_roll_count=expected_roll_count, points=points)


@pytest.fixture()
def make_racing_service():
    """Fabrique un GameService dont le repository de parties subit des courses."""

    def _build(db_session, *, max_retries, **races):
        return GameService(
            db_session,
            RacingGameRepository(db_session, **races),
            RollRepository(db_session),
            max_retries=max_retries,
        )

    return _build
