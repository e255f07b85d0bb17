#!/usr/bin/env python3
"""
CMS backend -- development launcher.

Usage:
  python main.py
  python main.py --port 9000
  python main.py --host 0.0.0.0 --reload

Defaults come from HOST / PORT (see core/config.py). Everything else --
SECRET_KEY, DATABASE_URL, DEBUG -- is read from the environment or .env by
the application itself at startup.
"""

import argparse

import uvicorn

from core.config import get_settings


def _parse_args(argv=None) -> argparse.Namespace:
    settings = get_settings()
    parser = argparse.ArgumentParser(description="Run the CMS API server.")
    parser.add_argument("--host", default=settings.host, help=f"Bind address (default: {settings.host})")
    parser.add_argument("--port", type=int, default=settings.port, help=f"Bind port (default: {settings.port})")
    parser.add_argument("--reload", action="store_true", help="Restart on code changes (development only)")
    return parser.parse_args(argv)


def main(argv=None) -> None:
    args = _parse_args(argv)
    uvicorn.run("asgi:app", host=args.host, port=args.port, reload=args.reload)


if __name__ == "__main__":
    main()
