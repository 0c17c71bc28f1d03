# csv_transfer.py
"""
CSV 导入/导出。

格式固定为四列: term, translation, knowledge_level, practice_at
导出时按此顺序输出表头；导入时按列名匹配，列的顺序无关。
practice_at 使用 RFC 3339（带时区偏移）。
"""
import csv
import logging

from errors import InvalidRowError, MissingColumnError
from models import MAX_KNOWLEDGE, Vocab, format_timestamp, parse_timestamp

logger = logging.getLogger(__name__)

COLUMNS = ('term', 'translation', 'knowledge_level', 'practice_at')

# 表头占第 1 行，数据行从第 2 行开始
FIRST_DATA_ROW = 2


def export_csv(store, out):
    """把全部单词按 id 顺序写入 out（文本流）。out 由调用方负责打开和关闭"""
    writer = csv.writer(out, lineterminator='\n')
    writer.writerow(COLUMNS)

    items, _ = store.find_all(order_by='id')
    for vocab in items:
        writer.writerow([
            vocab.term,
            vocab.translation,
            vocab.knowledge_level,
            format_timestamp(vocab.practice_at),
        ])
    logger.info('Exported %d vocab', len(items))
    return len(items)


def import_csv(store, source):
    """追加导入。所有行在一个事务里创建，任何一行出错都不会写入任何数据"""
    count = store.run_in_transaction(lambda tx: _import_rows(tx, source))
    logger.info('Imported %d vocab', count)
    return count


def import_csv_clean(store, source):
    """先删除全部单词再导入，删除和导入在同一个事务里，导入失败时原数据保持不变"""
    def work(tx):
        deleted = tx.delete_all()
        logger.info('Clean import: deleting %d existing vocab', deleted)
        return _import_rows(tx, source)

    count = store.run_in_transaction(work)
    logger.info('Imported %d vocab (clean)', count)
    return count


def resolve_columns(header):
    """表头 -> 各必需列的位置。缺少任何一列时抛出 MissingColumnError"""
    header = [name.strip() for name in header]
    if header and header[0].startswith('\ufeff'):
        # 去掉 UTF-8 BOM
        header[0] = header[0].lstrip('\ufeff')

    positions = {}
    for name in COLUMNS:
        if name not in header:
            raise MissingColumnError(name)
        positions[name] = header.index(name)
    return positions


def parse_row(row, positions, width, row_number):
    """校验一行并返回新的 Vocab（尚未保存）"""
    if len(row) != width:
        raise InvalidRowError(row_number)

    term = row[positions['term']]
    if not term.strip():
        raise InvalidRowError(row_number, 'term')

    translation = row[positions['translation']]
    if not translation.strip():
        raise InvalidRowError(row_number, 'translation')

    level = row[positions['knowledge_level']].strip()
    if not (level.isascii() and level.isdigit()) or int(level) > MAX_KNOWLEDGE:
        raise InvalidRowError(row_number, 'knowledge_level')

    try:
        practice_at = parse_timestamp(row[positions['practice_at']])
    except ValueError:
        raise InvalidRowError(row_number, 'practice_at')

    return Vocab(
        term=term,
        translation=translation,
        knowledge_level=int(level),
        practice_at=practice_at,
    )


def _import_rows(tx, source):
    reader = csv.reader(source)

    # 空文件视为缺少全部列
    header = next(reader, [])
    positions = resolve_columns(header)
    width = len(header)

    # 先读完全部行再写入
    rows = list(reader)

    count = 0
    for idx, row in enumerate(rows):
        if not row:
            # 空行
            continue
        tx.create(parse_row(row, positions, width, idx + FIRST_DATA_ROW))
        count += 1
    return count
