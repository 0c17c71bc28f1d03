"""
tests/conftest.py
测试配置：内存数据库 + 每个测试一个干净的客户端
"""
import pytest
import os

# ========== 关键：在导入app之前设置环境变量 ==========
os.environ['DB_URL'] = 'sqlite:///:memory:'
os.environ['TESTING'] = 'true'

# ========== 导入app ==========
from app import app, db
from models import Vocab
from services import in_days
from store import VocabStore


@pytest.fixture(scope='session', autouse=True)
def setup_test_environment():
    """
    设置测试环境 - 只在会话开始时执行一次
    """
    app.config.update({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        'SQLALCHEMY_TRACK_MODIFICATIONS': False,
    })

    with app.app_context():
        db.create_all()

    yield

    with app.app_context():
        db.drop_all()


@pytest.fixture(autouse=True)
def clean_database():
    """每个测试前后清空单词表"""
    with app.app_context():
        db.session.query(Vocab).delete()
        db.session.commit()

    yield

    with app.app_context():
        db.session.rollback()
        db.session.query(Vocab).delete()
        db.session.commit()
        db.session.remove()


@pytest.fixture
def test_client():
    """
    测试客户端fixture - 每个测试函数一个干净的客户端
    """
    with app.test_client() as client:
        yield client


@pytest.fixture
def store():
    """
    在应用上下文中的 VocabStore
    """
    with app.app_context():
        yield VocabStore(db.session)


@pytest.fixture
def add_vocab():
    """
    直接写入数据库的辅助函数，返回新单词的 id
    """
    def _add(term='foo', translation='bar', knowledge_level=0, days=0, practice_at=None):
        with app.app_context():
            vocab = Vocab(
                term=term,
                translation=translation,
                knowledge_level=knowledge_level,
                practice_at=practice_at if practice_at is not None else in_days(days),
            )
            db.session.add(vocab)
            db.session.commit()
            return vocab.id
    return _add


@pytest.fixture
def fetch_vocab():
    """
    按 id 重新读取单词，返回 dict（id 不存在时返回 None）
    """
    def _fetch(vocab_id):
        with app.app_context():
            vocab = db.session.get(Vocab, vocab_id)
            if vocab is None:
                return None
            return {
                'id': vocab.id,
                'term': vocab.term,
                'translation': vocab.translation,
                'knowledge_level': vocab.knowledge_level,
                'practice_at': vocab.practice_at,
            }
    return _fetch


@pytest.fixture
def vocab_count():
    def _count():
        with app.app_context():
            return db.session.query(Vocab).count()
    return _count


# ========== 注册pytest标记 ==========

def pytest_configure(config):
    config.addinivalue_line("markers", "unit: 标记为单元测试")
    config.addinivalue_line("markers", "integration: 标记为集成测试")
    config.addinivalue_line("markers", "e2e: 标记为端到端流程测试")
