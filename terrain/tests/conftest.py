"""Pytest configuration for terrain tests.

Adds the workspace root to sys.path so `terrain` and `ingest` import without
an editable install.
"""
import sys
from pathlib import Path

workspace_root = Path(__file__).parent.parent.parent
if str(workspace_root) not in sys.path:
    sys.path.insert(0, str(workspace_root))
