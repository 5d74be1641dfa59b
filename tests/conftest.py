from collections import defaultdict

import pytest
from fastapi.testclient import TestClient

from shiptivity.db import Client, init_db, make_engine, make_sessionmaker
from shiptivity.main import create_app

SEED = [
    # id, name, status, priority
    (1, "Stark, White and Abbott", "backlog", 1),
    (2, "Wiza LLC", "backlog", 2),
    (3, "Nolan LLC", "backlog", 3),
    (4, "Thompson PLC", "in-progress", 1),
    (5, "Walker-Williamson", "in-progress", 2),
    (6, "Boehm and Sons", "complete", 1),
]


def lanes_of(clients):
    """Map each lane to its client ids ordered by priority."""
    out = defaultdict(list)
    for c in sorted(clients, key=lambda c: (c["status"], c["priority"])):
        out[c["status"]].append(c["id"])
    return dict(out)


def check_contiguous(clients):
    by_lane = defaultdict(list)
    for c in clients:
        by_lane[c["status"]].append(c["priority"])
    for lane, priorities in by_lane.items():
        assert sorted(priorities) == list(range(1, len(priorities) + 1)), lane


@pytest.fixture
def lanes():
    return lanes_of


@pytest.fixture
def assert_contiguous():
    return check_contiguous


@pytest.fixture
def database_url(tmp_path):
    url = f"sqlite:///{tmp_path / 'clients.db'}"
    engine = make_engine(url)
    init_db(engine)
    with make_sessionmaker(engine)() as session:
        session.add_all(
            Client(id=i, name=name, description=None, status=status, priority=priority)
            for i, name, status, priority in SEED
        )
        session.commit()
    engine.dispose()
    return url


@pytest.fixture
def session(database_url):
    engine = make_engine(database_url)
    with make_sessionmaker(engine)() as session:
        yield session
    engine.dispose()


@pytest.fixture
def api(database_url):
    with TestClient(create_app(database_url)) as client:
        yield client
