#!/usr/bin/env python3
"""
Entry point wrapper for running the service from a source checkout.

Equivalent to the installed `codejudge` console script.
"""

import sys
import os

# Ensure the codejudge package can be imported without installing
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

if __name__ == "__main__":
    from codejudge.cli import main
    sys.exit(main())
