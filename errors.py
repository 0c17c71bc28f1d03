"""
errors.py
业务异常。与 Flask 无关，由 app.py 统一映射为 HTTP 状态码，由 cli.py 映射为退出码。
"""


class VocabError(Exception):
    """所有业务异常的基类"""
    pass


class NotFoundError(VocabError):
    """指定 id 的单词不存在"""

    def __init__(self, vocab_id):
        self.vocab_id = vocab_id
        super().__init__(f'Vocab not found. id: {vocab_id}')


class MissingColumnError(VocabError):
    """CSV 表头缺少必需的列"""

    def __init__(self, name):
        self.name = name
        super().__init__(f'Missing column. column: {name}')


class InvalidRowError(VocabError):
    """CSV 数据行校验失败。row_number 从 1 开始计数且包含表头；field 为出错的列名（可能为 None）"""

    def __init__(self, row_number, field=None):
        self.row_number = row_number
        self.field = field
        super().__init__(f'Invalid row. row: {row_number}, field: {field or "-"}')
