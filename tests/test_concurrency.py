import random
from concurrent.futures import ThreadPoolExecutor

from shiptivity.db import Lane, make_engine, make_sessionmaker
from shiptivity.reorder import reorder_client
from shiptivity.repository import ClientRepository

WORKERS = 4
MOVES_PER_WORKER = 15


def shuffle_clients(database_url, seed):
    rng = random.Random(seed)
    engine = make_engine(database_url)
    try:
        Session = make_sessionmaker(engine)
        for _ in range(MOVES_PER_WORKER):
            status = rng.choice([None, *Lane])
            priority = rng.choice([None, 1, 2, 3, 4])
            with Session() as session:
                reorder_client(session, rng.randint(1, 6), status=status, priority=priority)
    finally:
        engine.dispose()


def test_concurrent_updates_keep_lanes_contiguous(database_url, assert_contiguous):
    with ThreadPoolExecutor(max_workers=WORKERS) as pool:
        futures = [pool.submit(shuffle_clients, database_url, seed) for seed in range(WORKERS)]
        for future in futures:
            future.result()

    engine = make_engine(database_url)
    with make_sessionmaker(engine)() as session:
        clients = [
            {"id": c.id, "status": c.status, "priority": c.priority}
            for c in ClientRepository(session).list_all()
        ]
    engine.dispose()
    assert len(clients) == 6
    assert_contiguous(clients)
