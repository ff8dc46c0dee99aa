"""
Test suite for ImageSlim.

Test modules:
- test_core: channel extraction, rank selection, SVD and reconstruction
- test_compression: the end-to-end compression pipeline
- test_utils: quality metrics, image I/O and configuration
- test_cli: command line tools

Run tests with:
    pytest tests/

Run with coverage:
    pytest --cov=imageslim tests/
"""

import sys
from pathlib import Path

# Add src directory to path for testing
src_path = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_path))
