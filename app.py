# app.py
import io
import logging
import os
import sys

import chardet # 字符编码检测库
from flask import Flask, Response, jsonify, request
from sqlalchemy.exc import SQLAlchemyError
from werkzeug.exceptions import HTTPException

from config import Config
from csv_transfer import export_csv, import_csv, import_csv_clean
from errors import InvalidRowError, MissingColumnError, NotFoundError
from models import Vocab, db
from services import apply_outcomes, count_due, in_days, list_due
from store import DEFAULT_ORDER, ORDER_BY, VocabFilter, VocabStore

logger = logging.getLogger(__name__)

# 判断是否在测试环境中
TESTING = 'pytest' in sys.modules or 'unittest' in sys.modules or os.getenv('TESTING') == 'true'

app = Flask(__name__)

if TESTING:
    # 测试环境：使用内存 SQLite
    app.config.update({
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        'SQLALCHEMY_TRACK_MODIFICATIONS': False,
        'TESTING': True,
        'SQLALCHEMY_ENGINE_OPTIONS': {}
    })
else:
    app.config.from_object(Config)

db.init_app(app)


def init_db():
    """创建数据目录和表（需要在应用上下文中调用）"""
    url = db.engine.url
    if url.get_backend_name() == 'sqlite' and url.database and url.database != ':memory:':
        os.makedirs(os.path.dirname(os.path.abspath(url.database)), mode=0o700, exist_ok=True)
    db.create_all()


def get_store():
    return VocabStore(db.session)


def int_arg(name, default):
    """查询参数转整数，缺失或非法时使用默认值"""
    value = request.args.get(name, type=int)
    return default if value is None else value


# --- 错误处理 ---

@app.errorhandler(NotFoundError)
def handle_not_found(e):
    logger.info('%s %s: %s', request.method, request.path, e)
    return jsonify({'error': 'Vocab not found', 'id': e.vocab_id}), 404


@app.errorhandler(MissingColumnError)
def handle_missing_column(e):
    return jsonify({'error': str(e), 'column': e.name}), 400


@app.errorhandler(InvalidRowError)
def handle_invalid_row(e):
    return jsonify({'error': str(e), 'row': e.row_number, 'field': e.field}), 400


@app.errorhandler(Exception)
def handle_unexpected(e):
    if isinstance(e, HTTPException):
        return e
    # 数据库等内部错误只记日志，不把细节返回给客户端
    if isinstance(e, SQLAlchemyError):
        db.session.rollback()
    logger.error('Unhandled exception on %s %s', request.method, request.path, exc_info=e)
    return jsonify({'error': 'Oops, something went wrong...'}), 500


# --- API 接口 ---

@app.route('/api/vocab', methods=['GET'])
def get_vocab():
    vocab_filter = VocabFilter(
        term=request.args.get('term', ''),
        translation=request.args.get('translation', ''),
        mode=request.args.get('mode', 'and'),
    )
    order_by = request.args.get('order_by', DEFAULT_ORDER)
    if order_by not in ORDER_BY:
        order_by = DEFAULT_ORDER

    skip = max(int_arg('skip', 0), 0)
    take = min(max(int_arg('take', 10), 0), Config.MAX_TAKE)

    items, count = get_store().find_all(vocab_filter, order_by=order_by, offset=skip, limit=take)
    return jsonify({
        'count': count,
        'items': [v.to_dict() for v in items],
    })


@app.route('/api/vocab', methods=['POST'])
def post_vocab():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return jsonify({'error': 'invalid request body'}), 400

    term = data.get('term')
    if not isinstance(term, str) or not term.strip():
        return jsonify({'error': 'term is required'}), 400

    translation = data.get('translation')
    if not isinstance(translation, str) or not translation.strip():
        return jsonify({'error': 'translation is required'}), 400

    # 新单词：等级 0，今天就可以练习
    vocab = Vocab(term=term, translation=translation, knowledge_level=0, practice_at=in_days(0))
    vocab_id = get_store().create(vocab)
    return jsonify({'id': vocab_id})


@app.route('/api/vocab/<int:vocab_id>', methods=['DELETE'])
def delete_vocab(vocab_id):
    get_store().delete_by_id(vocab_id)
    return jsonify({'message': 'Deleted'}), 200


@app.route('/api/practice', methods=['GET'])
def get_practice():
    limit = min(max(int_arg('limit', Config.PRACTICE_LIMIT), 0), Config.MAX_TAKE)
    return jsonify([v.to_dict() for v in list_due(get_store(), limit)])


@app.route('/api/practice/count', methods=['GET'])
def get_practice_count():
    return jsonify({'count': count_due(get_store())})


@app.route('/api/practice', methods=['POST'])
def post_practice():
    """
    请求体: [{"id": 1, "passed": true}, ...]
    按顺序处理；遇到不存在的 id 返回 404，之前的结果已保存，之后的不处理
    """
    data = request.get_json(silent=True)
    if not isinstance(data, list):
        return jsonify({'error': 'invalid request body'}), 400

    outcomes = []
    for item in data:
        if not isinstance(item, dict):
            return jsonify({'error': 'invalid request body'}), 400
        vocab_id, passed = item.get('id'), item.get('passed', False)
        # bool 是 int 的子类，需要单独排除
        if not isinstance(vocab_id, int) or isinstance(vocab_id, bool) or not isinstance(passed, bool):
            return jsonify({'error': 'invalid request body'}), 400
        outcomes.append((vocab_id, passed))

    applied = apply_outcomes(get_store(), outcomes)
    return jsonify({'count': len(applied)})


@app.route('/api/export', methods=['GET'])
def export_file():
    out = io.StringIO()
    export_csv(get_store(), out)
    return Response(
        out.getvalue(),
        mimetype='text/csv',
        headers={'Content-Disposition': 'attachment; filename=vocab.csv'},
    )


@app.route('/api/import', methods=['POST'])
def import_file():
    if 'file' not in request.files:
        return jsonify({'error': 'No file part'}), 400
    file = request.files['file']

    # 1. 读取原始二进制数据
    raw_data = file.read()

    # 2. 优先按 utf-8 解码，失败时再自动检测编码（比如 Excel 导出的 GBK / cp1252）
    try:
        content = raw_data.decode('utf-8')
    except UnicodeDecodeError:
        result = chardet.detect(raw_data)
        encoding = result['encoding']
        if not encoding or result['confidence'] < 0.3:
            return jsonify({'error': '无法识别该文件编码'}), 400
        try:
            content = raw_data.decode(encoding)
        except (UnicodeDecodeError, LookupError):
            return jsonify({'error': '无法识别该文件编码'}), 400

    # 二进制文件（比如图片）直接拦截
    if '\x00' in content:
        return jsonify({'error': '文件内容非法：检测到二进制流'}), 400

    clean = request.values.get('clean', '').lower() in ('1', 'true', 'yes')
    source = io.StringIO(content, newline='')
    if clean:
        count = import_csv_clean(get_store(), source)
    else:
        count = import_csv(get_store(), source)

    return jsonify({
        'message': f'成功导入 {count} 个单词。',
        'count': count,
    })


if __name__ == '__main__':
    with app.app_context():
        init_db()
    app.run(host=Config.HOST, port=Config.PORT, debug=True)
