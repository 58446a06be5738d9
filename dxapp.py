#!/usr/bin/env python3
"""
Entry point for the US Data Explorer summary engine

Usage:
    python dxapp.py <DATASET> [PATH_OR_URL] [--year YEAR] [--state PO] [--output-dir DIR]
"""
import sys
from pathlib import Path

# Make dx_core importable when running from the top-level directory
sys.path.append(str(Path(__file__).resolve().parent))

from dx_core.runner import main

if __name__ == "__main__":
    sys.exit(main())
