import pytest

from app.db import Base, make_engine, make_session_factory
from app.recents import MAX_RECENT, add_recent_customer, clear_recent_customers, get_recent_customers


@pytest.fixture
def db(tmp_path):
    engine = make_engine(f"sqlite:///{tmp_path / 'recents.db'}")
    Base.metadata.create_all(bind=engine)
    session = make_session_factory(engine)()
    try:
        yield session
    finally:
        session.close()


def test_newest_first_and_capped(db):
    for i in range(MAX_RECENT + 2):
        add_recent_customer(db, 1, f"Client {i}")
    assert get_recent_customers(db, 1) == [f"Client {i}" for i in range(MAX_RECENT + 1, 1, -1)]


def test_case_insensitive_dedup_moves_to_top(db):
    add_recent_customer(db, 1, "Global Ace")
    add_recent_customer(db, 1, "Metro Dynamics")
    assert add_recent_customer(db, 1, "global ace") == ["global ace", "Metro Dynamics"]


def test_per_operator(db):
    add_recent_customer(db, 1, "A")
    add_recent_customer(db, 2, "B")
    assert get_recent_customers(db, 1) == ["A"]
    clear_recent_customers(db, 1)
    assert get_recent_customers(db, 1) == []
    assert get_recent_customers(db, 2) == ["B"]


def test_blank_name_ignored(db):
    assert add_recent_customer(db, 1, "   ") == []
