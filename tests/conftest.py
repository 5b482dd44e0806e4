import pytest

from everest_speak.catalog import build_catalog
from everest_speak.db import init_db
from everest_speak.seed import seed_all


@pytest.fixture
def tmp_db(tmp_path):
    """Provide a temporary SQLite database path for tests."""
    db_path = str(tmp_path / "test_everest.db")
    return db_path


@pytest.fixture
def seeded_db(tmp_db):
    """Temporary database with schema and branches in place."""
    init_db(tmp_db)
    seed_all(tmp_db)
    return tmp_db


@pytest.fixture
def small_catalog():
    return build_catalog([
        {"Category": "인사", "Korean": "안녕하세요"},
        {"Category": "주문", "Korean": "주문하시겠어요?"},
        {"Category": "감사", "Korean": "감사합니다"},
    ])


@pytest.fixture
def catalog():
    return build_catalog([
        {"Category": "Hall", "Situation": "Greeting", "Korean": f"문장 {i}번 입니다.", "Nepali": f"Sentence {i}"}
        for i in range(1, 41)
    ])
