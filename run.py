#!/usr/bin/env python3
"""Convenience runner for the trackline pipeline.

Usage:
    python run.py ENTITY_ID YYYY-MM-DD [--json] [--map-html PATH]
"""
import logging
import sys

from trackline.main import main

if __name__ == "__main__":
    if not logging.getLogger().hasHandlers():
        logging.basicConfig(level=logging.INFO, format="[%(asctime)s] %(levelname)s %(name)s: %(message)s")
    sys.exit(main())
