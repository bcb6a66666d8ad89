#!/usr/bin/env python
"""
MinuteScribe - Direct launcher
Run with: python main.py
"""

import sys
from pathlib import Path

# Add src to path
src_path = Path(__file__).parent / "src"
sys.path.insert(0, str(src_path))

# Now import and run
from minutescribe.main import main


if __name__ == "__main__":
    sys.exit(main())
