"""Shared fixtures: a fresh SQLite file per test, FastAPI client, factories.

A file database (not :memory:) so every session gets its own connection and
transactions are really isolated from each other, like separate workers.
"""

import os

os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("JWT_SECRET", "test-jwt-secret")
os.environ.setdefault("REVENUECAT_WEBHOOK_SECRET", "test-webhook-secret")
os.environ.setdefault("LOG_FORMAT", "text")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

import app.models  # noqa: F401
from app.core.config import settings
from app.core.security import create_access_token
from app.db.base import Base
from app.db.session import get_db
from app.main import app as application
from app.models import Post, PremiumPackage, Recipe, User


@pytest.fixture
def engine(tmp_path):
    engine = create_engine(
        f"sqlite:///{tmp_path / 'test.db'}",
        # Threaded tests wait on the write lock instead of failing fast
        connect_args={"check_same_thread": False, "timeout": 30},
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, autocommit=False, expire_on_commit=False)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    application.dependency_overrides[get_db] = override_get_db
    with TestClient(application) as c:
        yield c
    application.dependency_overrides.clear()


@pytest.fixture
def webhook_secret():
    return settings.revenuecat_webhook_secret


@pytest.fixture
def make_user(db):
    counter = {"n": 0}

    def _make(**kwargs) -> User:
        counter["n"] += 1
        n = counter["n"]
        user = User(username=kwargs.pop("username", f"user{n}"), email=kwargs.pop("email", f"user{n}@example.com"), **kwargs)
        db.add(user)
        db.commit()
        return user

    return _make


@pytest.fixture
def make_post(db, make_user):
    def _make(owner: User | None = None, **kwargs) -> Post:
        owner = owner or make_user()
        post = Post(user_id=owner.id, title=kwargs.pop("title", "Lentil soup"), **kwargs)
        db.add(post)
        db.commit()
        return post

    return _make


@pytest.fixture
def make_recipe(db):
    def _make(**kwargs) -> Recipe:
        recipe = Recipe(
            name=kwargs.pop("name", "Shakshuka"),
            ingredients=kwargs.pop("ingredients", "eggs, tomatoes, peppers"),
            instructions=kwargs.pop("instructions", "Simmer, crack eggs, cover."),
            **kwargs,
        )
        db.add(recipe)
        db.commit()
        return recipe

    return _make


@pytest.fixture
def make_package(db):
    def _make(store_product_id: str = "premium_monthly", **kwargs) -> PremiumPackage:
        package = PremiumPackage(
            name=kwargs.pop("name", "Premium Monthly"),
            store_product_id=store_product_id,
            trial_days=kwargs.pop("trial_days", 7),
            **kwargs,
        )
        db.add(package)
        db.commit()
        return package

    return _make


@pytest.fixture
def auth_headers():
    def _headers(user: User) -> dict:
        return {"Authorization": f"Bearer {create_access_token(str(user.id))}"}

    return _headers
