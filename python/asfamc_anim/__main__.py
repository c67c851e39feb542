"""
Entry point for running the package as a module.

Usage:
    python -m asfamc_anim skeleton.asf motion.amc --frames 120 --joints
"""

import sys

from .main import main

if __name__ == '__main__':
    sys.exit(main())
