"""
Pytest Configuration
====================

Automatically loaded by pytest. Adds src/ to sys.path
so seamless_core is importable without installation.

Usage:
    cd src
    pytest tests/ -v
"""

import sys
from pathlib import Path

src_root = Path(__file__).parent
if str(src_root) not in sys.path:
    sys.path.insert(0, str(src_root))
