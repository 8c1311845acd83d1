#!/usr/bin/env python3
"""
HtmxTodo -- command-line entry point.

Usage:
  python main.py serve
  python main.py serve --host 0.0.0.0 --port 8080
  python main.py serve --reload
  python main.py init-db

Environment variables (see core/config.py for the full list):
  ENV                    development (default), production, or test
  DATABASE_URL           SQLAlchemy URL; defaults to a local SQLite file
  SECRET_KEY             required in production, >= 32 characters
  COGNITO_USER_POOL_ID   from the HtmxtodoUserPoolId stack export
  COGNITO_CLIENT_ID      from the HtmxtodoUserPoolClientId stack export
"""

import argparse

from core.config import get_settings


def _serve(args: argparse.Namespace) -> None:
    import uvicorn

    settings = get_settings()
    host = args.host or settings.host
    port = args.port or settings.port
    uvicorn.run(
        "asgi:app",
        host=host,
        port=port,
        reload=args.reload,
        proxy_headers=True,
    )


def _init_db(args: argparse.Namespace) -> None:
    from lists.store import ListStore

    settings = get_settings()
    store = ListStore(settings.effective_database_url)
    store.close()
    print(f"Schema ready at {settings.effective_database_url}")


def main() -> None:
    parser = argparse.ArgumentParser(
        prog="htmxtodo",
        description="Server-rendered todo lists with htmx and Cognito sign-in.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")

    serve = subparsers.add_parser("serve", help="Run the web server")
    serve.add_argument("--host", default=None, help="Bind address (default: HOST or 127.0.0.1)")
    serve.add_argument("--port", type=int, default=None, help="Bind port (default: PORT or 8080)")
    serve.add_argument("--reload", action="store_true", help="Restart on code changes (development only)")
    serve.set_defaults(func=_serve)

    init_db = subparsers.add_parser("init-db", help="Create the database schema and exit")
    init_db.set_defaults(func=_init_db)

    args = parser.parse_args()
    if not hasattr(args, "func"):
        parser.print_help()
        return
    args.func(args)


if __name__ == "__main__":
    main()
