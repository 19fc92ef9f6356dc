"""Pytest configuration for the PLC test suite."""
import sys
from pathlib import Path

# Make `plc` and the `main` CLI module importable without installing
project_root = Path(__file__).parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))
