# services.py
"""
练习调度：根据练习结果（通过/未通过）计算新的熟悉程度和下次练习日期。

通过: 熟悉程度 +1（最高 7），下次练习 = 今天 + KNOWLEDGE_INTERVALS[新等级] 天
未通过: 熟悉程度 -1（最低 0），下次练习 = 明天
"""
import logging
from datetime import date, datetime, time, timedelta
from types import MappingProxyType

from config import Config
from errors import NotFoundError
from models import MAX_KNOWLEDGE
from store import VocabFilter

logger = logging.getLogger(__name__)

# 熟悉程度 -> 间隔天数（只读）
KNOWLEDGE_INTERVALS = MappingProxyType({
    1: 1,
    2: 2,
    3: 4,
    4: 8,
    5: 16,
    6: 32,
    7: 64,
})

# 未通过时固定明天再练
RETRY_INTERVAL = 1


def today():
    """今天零点（本地时间）"""
    return datetime.combine(date.today(), time.min)


def in_days(n):
    """今天零点 + n 天，跨月/跨年由日期运算处理"""
    return datetime.combine(date.today() + timedelta(days=n), time.min)


def next_schedule(level, passed):
    """返回 (新的熟悉程度, 下次练习时间)"""
    if passed:
        level = min(level + 1, MAX_KNOWLEDGE)
        # 通过后等级至少为 1，查表不会落空
        return level, in_days(KNOWLEDGE_INTERVALS.get(level, RETRY_INTERVAL))
    return max(level - 1, 0), in_days(RETRY_INTERVAL)


def apply_outcome(store, vocab_id, passed):
    """对单个单词应用练习结果并保存。单词不存在时抛出 NotFoundError，不做任何修改"""
    vocab = store.find_by_id(vocab_id)
    if vocab is None:
        raise NotFoundError(vocab_id)

    vocab.knowledge_level, vocab.practice_at = next_schedule(vocab.knowledge_level, passed)
    store.update(vocab)
    logger.debug('Vocab %s -> level %s, practice at %s',
                 vocab.id, vocab.knowledge_level, vocab.practice_at.date())
    return vocab


def apply_outcomes(store, outcomes):
    """
    按提交顺序逐个应用 (vocab_id, passed)。
    每个单词单独保存；遇到第一个不存在的 id 时抛出 NotFoundError，
    之前的结果已经保存，之后的不再处理。
    """
    applied = []
    for vocab_id, passed in outcomes:
        applied.append(apply_outcome(store, vocab_id, passed))
    return applied


def list_due(store, limit=None):
    """到期的单词（practice_at 早于当前时间），最早到期的排在前面"""
    if limit is None:
        limit = Config.PRACTICE_LIMIT
    items, _ = store.find_all(VocabFilter(due_before=datetime.now()),
                              order_by='practice_at', limit=limit)
    return items


def count_due(store):
    return store.count(VocabFilter(due_before=datetime.now()))
