#!/usr/bin/env python3
"""Convenience runner for the route planner CLI.

Usage:
    python run.py route 13.388,52.517 13.397,52.529
"""
import logging
import sys

from route_planner.cli import main

if __name__ == "__main__":
    if not logging.getLogger().hasHandlers():
        logging.basicConfig(level=logging.INFO, format="[%(asctime)s] %(levelname)s %(name)s: %(message)s")
    sys.exit(main())
