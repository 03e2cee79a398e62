#!/usr/bin/env python3
"""
Main entry point script for Commander Finder.

This script can be run directly from the command line to search for
commanders by color identity.
"""

import sys
from pathlib import Path

# Add the project directory to Python path
project_dir = Path(__file__).parent
sys.path.insert(0, str(project_dir))

from commander_finder.cli import main

if __name__ == "__main__":
    main()
