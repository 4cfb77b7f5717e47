#!/usr/bin/env python3
"""
PriceSync - Main Entry Point
============================

Scrapes stock prices for the symbols listed in a spreadsheet and writes the
prices and update timestamps back.

Usage:
    python main.py                   # Run one update
    python main.py --mode scheduler  # Run the weekday cron schedule
    python main.py --mode api        # Serve the HTTP trigger
    python main.py --help            # Show help
"""

import argparse
import asyncio
import os
import sys

from dotenv import load_dotenv


def main() -> int:
    parser = argparse.ArgumentParser(description="PriceSync stock price updater")
    parser.add_argument("--mode", choices=["once", "scheduler", "api"], default="once")
    parser.add_argument("--port", type=int, default=int(os.getenv("PORT", 8000)))
    args, rest = parser.parse_known_args()

    load_dotenv()

    if args.mode == "scheduler":
        from pricesync.scheduler import cron

        asyncio.run(cron.main())
        return 0

    if args.mode == "api":
        import uvicorn

        uvicorn.run("pricesync.api.app:app", host="0.0.0.0", port=args.port, log_level="info")
        return 0

    from pricesync.main import main as run_once

    return run_once(rest)


if __name__ == "__main__":
    sys.exit(main())
