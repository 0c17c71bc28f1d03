# cli.py
"""
命令行入口:

    vocab start  [--host HOST] [--port PORT] [--open]
    vocab export [--file vocab.csv]
    vocab import --file PATH [--clean]
"""
import argparse
import logging
import sys
import threading
import webbrowser

from config import Config

logger = logging.getLogger('vocab')

START_HEADLINE = 'Starts the vocab web application.'
EXPORT_HEADLINE = 'Export vocab to a CSV.'
IMPORT_HEADLINE = 'Import vocab from a CSV.'


def build_parser():
    parser = argparse.ArgumentParser(prog='vocab', description='Personal vocabulary flashcards.')
    sub = parser.add_subparsers(dest='command', metavar='<command>')

    start = sub.add_parser('start', help=START_HEADLINE, description=START_HEADLINE)
    start.add_argument('--host', default=Config.HOST, help='Interface to bind the server to')
    start.add_argument('--port', type=int, default=Config.PORT, help='Port on which to serve the application')
    start.add_argument('--open', action='store_true', help='Automatically open a web browser')
    start.set_defaults(func=cmd_start)

    export = sub.add_parser('export', help=EXPORT_HEADLINE, description=EXPORT_HEADLINE)
    export.add_argument('--file', default='vocab.csv', help='File path to export the CSV')
    export.set_defaults(func=cmd_export)

    imp = sub.add_parser('import', help=IMPORT_HEADLINE, description=IMPORT_HEADLINE)
    imp.add_argument('--file', required=True, help='File path to the import CSV')
    imp.add_argument('--clean', action='store_true', help='Clean import will delete all existing vocab')
    imp.set_defaults(func=cmd_import)

    return parser


def cmd_start(args):
    from app import app, init_db

    with app.app_context():
        init_db()

    url = f'http://localhost:{args.port}'
    if args.open:
        # 等服务起来再打开浏览器
        threading.Timer(0.5, webbrowser.open, args=(url,)).start()

    logger.info('Serving at %s', url)
    app.run(host=args.host, port=args.port)
    return 0


def cmd_export(args):
    from app import app, get_store, init_db
    from csv_transfer import export_csv

    with app.app_context():
        init_db()
        with open(args.file, 'w', encoding='utf-8', newline='') as f:
            count = export_csv(get_store(), f)
    print(f'Exported {count} vocab to {args.file}')
    return 0


def cmd_import(args):
    from app import app, get_store, init_db
    from csv_transfer import import_csv, import_csv_clean

    with app.app_context():
        init_db()
        # utf-8-sig 兼容带 BOM 的文件
        with open(args.file, encoding='utf-8-sig', newline='') as f:
            if args.clean:
                count = import_csv_clean(get_store(), f)
            else:
                count = import_csv(get_store(), f)
    print(f'Imported {count} vocab from {args.file}')
    return 0


def main(argv=None):
    logging.basicConfig(
        level=getattr(logging, Config.LOG_LEVEL.upper(), logging.INFO),
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
    )

    parser = build_parser()
    args = parser.parse_args(argv)
    if args.command is None:
        parser.print_help(sys.stderr)
        return 1

    try:
        return args.func(args)
    except Exception as e:
        logger.error('%s', e)
        return 1


if __name__ == '__main__':
    sys.exit(main())
