#!/usr/bin/env python3
"""
Dry Run - Generate the snack roster without touching the schedule store

Usage:
  python scripts/run_dry_run.py --start 2026-02-20 --end 2026-07-03 --seed 7

Outputs to outputs/ directory.
"""

import sys
from pathlib import Path

# Add project root to path
PROJECT_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from snack_roster.dry_run import main

if __name__ == "__main__":
    main()
