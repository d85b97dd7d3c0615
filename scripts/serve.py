#!/usr/bin/env python3
"""
Run the content API locally.

Usage:
    python serve.py --port 8000 --reload
"""

import argparse
import sys

import uvicorn


def main() -> int:
    parser = argparse.ArgumentParser(description="Run the content API")
    parser.add_argument("--host", default="127.0.0.1")
    parser.add_argument("--port", type=int, default=8000)
    parser.add_argument("--reload", action="store_true", help="Restart on code changes")
    args = parser.parse_args()

    uvicorn.run("contentsite.main:app", host=args.host, port=args.port, reload=args.reload, log_config=None)
    return 0


if __name__ == "__main__":
    sys.exit(main())
