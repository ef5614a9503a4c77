# SPDX-License-Identifier: MIT
"""Pytest environment setup.

Ensure the repository root is importable so the suite can resolve the
``graphite_adapter`` package and the shared ``tests.fixtures`` helpers
without installing anything.
"""

from __future__ import annotations

import pathlib
import sys

ROOT = pathlib.Path(__file__).resolve().parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))
