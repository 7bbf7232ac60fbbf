#!/usr/bin/env python3
"""Start the image gateway under uvicorn: ``python run.py [--reload] [--port 8080]``."""

import argparse

import uvicorn

from gateway.config import get_settings


def main():
    settings = get_settings()

    parser = argparse.ArgumentParser(description=settings.app_name)
    parser.add_argument("--host", default=settings.host)
    parser.add_argument("--port", type=int, default=settings.port)
    parser.add_argument("--reload", action="store_true", help="Restart on code changes")
    args = parser.parse_args()

    # A single process keeps one edge cache; scale out with more instances
    uvicorn.run(
        "gateway.main:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
