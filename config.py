# config.py
import os

# 数据目录，默认放在用户主目录下的 .vocab
VOCAB_DIR = os.getenv('VOCAB_DIR', os.path.join(os.path.expanduser('~'), '.vocab'))


class Config:
    # 默认使用本地 SQLite 文件，也可以通过 DB_URL 指定其他数据库
    # 格式: sqlite:////绝对路径/vocab.db
    SQLALCHEMY_DATABASE_URI = os.getenv('DB_URL', 'sqlite:///' + os.path.join(VOCAB_DIR, 'vocab.db'))
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # 服务配置
    HOST = os.getenv('HOST', '127.0.0.1')
    PORT = int(os.getenv('PORT', '3000'))

    # 练习与分页
    PRACTICE_LIMIT = int(os.getenv('PRACTICE_LIMIT', '10'))
    MAX_TAKE = int(os.getenv('MAX_TAKE', '50'))

    LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')
