#!/usr/bin/env python3
"""``edsio`` spectrum inspector.

Usage:
    python scripts/inspect_spectra.py sample.msa
    python scripts/inspect_spectra.py data/*.spx --emsa out/ --config scripts/user_config.py
    python scripts/inspect_spectra.py data/*.spc --summary out/summary.parquet --fail-fast

Note: User config in scripts/user_config.py, expert defaults in src/edsio/schemas/param.py
"""

import sys
from pathlib import Path

# Add src to path
project_root = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(project_root / "src"))

from edsio.cli.run_inspect import main


if __name__ == "__main__":
    sys.exit(main())
