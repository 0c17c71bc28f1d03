# models.py
from datetime import datetime

from flask_sqlalchemy import SQLAlchemy

db = SQLAlchemy()

MAX_KNOWLEDGE = 7


def format_timestamp(value):
    """本地时间 -> RFC 3339 字符串（带时区偏移），例如 2026-10-17T00:00:00+02:00"""
    if value.tzinfo is None:
        # 数据库里存的是本地时间
        value = value.astimezone()
    return value.isoformat(timespec='seconds')


def parse_timestamp(text):
    """RFC 3339 字符串 -> 本地时间（naive）。没有时区偏移时抛出 ValueError"""
    value = datetime.fromisoformat(text.strip())
    if value.tzinfo is None:
        raise ValueError(f'timestamp without UTC offset: {text!r}')
    return value.astimezone().replace(tzinfo=None)


class Vocab(db.Model):
    __tablename__ = 'vocab'
    id = db.Column(db.Integer, primary_key=True)
    # 创建时间，不对外暴露
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.now)
    term = db.Column(db.String(255), nullable=False)
    translation = db.Column(db.String(255), nullable=False)
    # 熟悉程度: 0=新词 ... 7=完全掌握
    knowledge_level = db.Column(db.Integer, nullable=False, default=0)
    # 下次练习时间（本地时间）
    practice_at = db.Column(db.DateTime, nullable=False, index=True)

    __table_args__ = (
        db.CheckConstraint(
            f'knowledge_level >= 0 AND knowledge_level <= {MAX_KNOWLEDGE}',
            name='ck_vocab_knowledge_level'),
    )

    def to_dict(self):
        return {
            'id': self.id,
            'term': self.term,
            'translation': self.translation,
            'knowledgeLevel': self.knowledge_level,
            'practiceAt': format_timestamp(self.practice_at),
        }

    def __repr__(self):
        return f'<Vocab {self.id} {self.term!r}>'
