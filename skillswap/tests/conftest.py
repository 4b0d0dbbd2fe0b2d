import os
import tempfile

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("MONGO_URI", "mongodb://localhost:27017")
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("SMTP_SERVER", "localhost")
os.environ.setdefault("SMTP_PORT", "1025")
os.environ.setdefault("SMTP_USER", "test")
os.environ.setdefault("SMTP_PASSWORD", "test")
os.environ.setdefault("EMAILS_FROM_EMAIL", "no-reply@skillswap.test")
os.environ.setdefault("MEDIA_ROOT", tempfile.mkdtemp(prefix="skillswap-media-"))

from datetime import timedelta

import pytest
import pytest_asyncio
from bson import ObjectId
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel import SQLModel

from skillswap.db import get_session
from skillswap.db import mongodb
from skillswap.main import create_app
from skillswap.models.category import Category
from skillswap.models.profile import Profile
from skillswap.models.skill import Skill
from skillswap.models.swaps import SwapRequest
from skillswap.models.user import User
from skillswap.utils.auth import create_access_token


def _matches(document, query):
    for key, expected in query.items():
        if key == "$or":
            if not any(_matches(document, sub_query) for sub_query in expected):
                return False
        elif document.get(key) != expected:
            return False
    return True


class FakeInsertResult:
    def __init__(self, inserted_id):
        self.inserted_id = inserted_id


class FakeUpdateResult:
    def __init__(self, count):
        self.modified_count = count
        self.deleted_count = count


class FakeCursor:
    def __init__(self, documents):
        self.documents = documents

    def sort(self, key, direction=1):
        self.documents = sorted(self.documents, key=lambda d: d[key], reverse=direction < 0)
        return self

    def __iter__(self):
        return iter(self.documents)


class FakeCollection:
    """In-memory stand-in for the pymongo collection calls the app makes."""

    def __init__(self):
        self.documents = []

    def insert_one(self, document):
        document["_id"] = ObjectId()
        self.documents.append(dict(document))
        return FakeInsertResult(document["_id"])

    def find(self, query=None):
        return FakeCursor([dict(d) for d in self.documents if _matches(d, query or {})])

    def find_one(self, query=None):
        return next((dict(d) for d in self.documents if _matches(d, query or {})), None)

    def update_many(self, query, update):
        matched = [d for d in self.documents if _matches(d, query)]
        for document in matched:
            document.update(update.get("$set", {}))
        return FakeUpdateResult(len(matched))

    def count_documents(self, query):
        return sum(1 for d in self.documents if _matches(d, query))

    def delete_many(self, query):
        before = len(self.documents)
        self.documents = [d for d in self.documents if not _matches(d, query)]
        return FakeUpdateResult(before - len(self.documents))

    def create_index(self, *args, **kwargs):
        return "index"


class FakeMongoDB:
    def __init__(self):
        self.collections = {}

    def get_collection(self, collection_name):
        return self.collections.setdefault(collection_name, FakeCollection())

    def ensure_indexes(self):
        pass

    def disconnect(self):
        pass


@pytest_asyncio.fixture(scope="function")
async def async_engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test-skillswap.db'}", echo=False)
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.drop_all)
        await conn.run_sync(SQLModel.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_maker(async_engine):
    return sessionmaker(bind=async_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def async_session(session_maker):
    async with session_maker() as session:
        yield session


@pytest.fixture
def fake_mongo(monkeypatch):
    fake = FakeMongoDB()
    monkeypatch.setattr(mongodb, "mongodb", fake)
    return fake


@pytest.fixture
def messages_collection(fake_mongo):
    return fake_mongo.get_collection("messages")


@pytest.fixture
def sent_emails(monkeypatch):
    sent = []

    async def fake_send_verification_email(email_to, user_name, verification_url):
        sent.append({"email_to": email_to, "user_name": user_name, "verification_url": verification_url})

    monkeypatch.setattr("skillswap.router.auth.send_verification_email", fake_send_verification_email)
    return sent


@pytest.fixture
def app(monkeypatch, session_maker, fake_mongo, sent_emails):
    monkeypatch.setattr(mongodb, "init_mongoDB", lambda settings: None)
    app = create_app()

    async def override_get_session():
        async with session_maker() as session:
            yield session

    app.dependency_overrides[get_session] = override_get_session
    return app


@pytest_asyncio.fixture
async def client(app):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client


def auth_headers(user: User) -> dict:
    token = create_access_token(data={"sub": user.email}, expires_delta=timedelta(minutes=30))
    return {"Authorization": f"Bearer {token}"}


async def create_user(session, name, email, role="user", hashed_password="hashedpassword", **fields):
    fields.setdefault("is_verified", True)
    user = User(name=name, email=email, hashed_password=hashed_password, role=role, **fields)
    session.add(user)
    await session.commit()
    await session.refresh(user)
    session.add(Profile(user_id=user.id))
    await session.commit()
    return user


async def create_skill(session, user, skill_name, type="offer", level="intermediate", category=None):
    skill = Skill(
        user_id=user.id,
        skill_name=skill_name,
        type=type,
        level=level,
        category_id=category.id if category else None,
    )
    session.add(skill)
    await session.commit()
    await session.refresh(skill)
    return skill


@pytest_asyncio.fixture
async def category(async_session):
    category = Category(name="Music", icon="🎵")
    async_session.add(category)
    await async_session.commit()
    await async_session.refresh(category)
    return category


@pytest_asyncio.fixture
async def users(async_session):
    user1 = await create_user(async_session, "John Doe", "john@example.com")
    user2 = await create_user(async_session, "Ali Hassan", "ali@example.com")
    user3 = await create_user(async_session, "Emma Wilson", "emma@example.com")
    return user1, user2, user3


@pytest_asyncio.fixture
async def admin(async_session):
    return await create_user(async_session, "Admin", "admin@skillswap.com", role="admin")


@pytest_asyncio.fixture
async def skills(async_session, users, category):
    user1, user2, _ = users
    guitar = await create_skill(async_session, user1, "Guitar", category=category)
    python = await create_skill(async_session, user2, "Python")
    return guitar, python


async def make_swap(session, sender, receiver, offered, requested, status="pending"):
    swap = SwapRequest(
        sender_id=sender.id,
        receiver_id=receiver.id,
        offered_skill_id=offered.id,
        requested_skill_id=requested.id,
        status=status,
    )
    session.add(swap)
    await session.commit()
    await session.refresh(swap)
    return swap
