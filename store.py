"""
store.py
单词存储：对 SQLAlchemy session 的一层薄封装，提供增删改查、过滤/排序/分页和事务。
"""
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from sqlalchemy import and_, or_

from errors import NotFoundError
from models import Vocab

logger = logging.getLogger(__name__)

# order_by 参数 -> 排序字段；term 总是作为第二排序字段
ORDER_BY = {
    'term': (Vocab.term,),
    'knowledge_level': (Vocab.knowledge_level, Vocab.term),
    'knowledge_level_desc': (Vocab.knowledge_level.desc(), Vocab.term),
    'practice_at': (Vocab.practice_at, Vocab.term),
    'practice_at_desc': (Vocab.practice_at.desc(), Vocab.term),
    'id': (Vocab.id,),
}
DEFAULT_ORDER = 'term'


@dataclass
class VocabFilter:
    term: str = ''
    translation: str = ''
    # 'and' 或 'or'，只有 term 和 translation 同时存在时才有意义
    mode: str = 'and'
    # 只保留 practice_at 早于该时间的单词
    due_before: Optional[datetime] = None


class VocabStore:
    """
    用法:
        store = VocabStore(db.session)
        vocab_id = store.create(Vocab(...))
        store.run_in_transaction(lambda tx: tx.delete_all())

    事务外的写操作立即提交；事务内（run_in_transaction 传入的 tx）只 flush，
    由 run_in_transaction 统一提交或回滚。
    """

    def __init__(self, session, autocommit=True):
        self.session = session
        self.autocommit = autocommit

    def _commit(self):
        if self.autocommit:
            self.session.commit()
        else:
            self.session.flush()

    def create(self, vocab):
        self.session.add(vocab)
        self._commit()
        return vocab.id

    def find_by_id(self, vocab_id):
        return self.session.get(Vocab, vocab_id)

    def find_all(self, filter=None, order_by=DEFAULT_ORDER, offset=0, limit=None):
        """返回 (items, total)。total 是过滤后、分页前的总数"""
        q = self._filtered(filter)
        total = q.count()

        q = q.order_by(*ORDER_BY.get(order_by, ORDER_BY[DEFAULT_ORDER]))
        if offset:
            q = q.offset(offset)
        if limit is not None:
            q = q.limit(limit)
        return q.all(), total

    def count(self, filter=None):
        return self._filtered(filter).count()

    def update(self, vocab):
        self.session.add(vocab)
        self._commit()

    def delete_by_id(self, vocab_id):
        vocab = self.find_by_id(vocab_id)
        if vocab is None:
            raise NotFoundError(vocab_id)
        self.session.delete(vocab)
        self._commit()

    def delete_all(self):
        deleted = self.session.query(Vocab).delete()
        self._commit()
        return deleted

    def run_in_transaction(self, fn):
        """
        在一个事务中执行 fn(tx)：全部成功则提交，任何异常都回滚并继续抛出。
        返回 fn 的返回值。
        """
        tx = VocabStore(self.session, autocommit=False)
        try:
            result = fn(tx)
            self.session.commit()
        except Exception:
            logger.debug('Rolling back transaction')
            self.session.rollback()
            raise
        return result

    def _filtered(self, filter):
        q = self.session.query(Vocab)
        if filter is None:
            return q

        term_clause = Vocab.term.icontains(filter.term, autoescape=True) if filter.term else None
        translation_clause = (Vocab.translation.icontains(filter.translation, autoescape=True)
                              if filter.translation else None)
        if term_clause is not None and translation_clause is not None:
            if filter.mode == 'or':
                q = q.filter(or_(term_clause, translation_clause))
            else:
                q = q.filter(and_(term_clause, translation_clause))
        elif term_clause is not None:
            q = q.filter(term_clause)
        elif translation_clause is not None:
            q = q.filter(translation_clause)

        if filter.due_before is not None:
            q = q.filter(Vocab.practice_at < filter.due_before)
        return q
