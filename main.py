#!/usr/bin/env python3
"""
Podnorm - Podcast Feed Normalizer
=================================

Entry point for running from a source checkout without installing.

Usage:
    python main.py --help                    # Show all commands
    python main.py check-config              # Validate configuration
    python main.py run                       # Normalize the input directory
    python main.py parse FILE [--json]       # Normalize one feed file
"""

import sys
from pathlib import Path

# Add project root to Python path
sys.path.insert(0, str(Path(__file__).parent))

from podnorm.cli import main

if __name__ == "__main__":
    main()
