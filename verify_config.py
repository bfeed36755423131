#!/usr/bin/env python3
"""Validate a configuration file before deploying it.

Usage: python verify_config.py [path]   (default: config.example.yaml)
"""

import sys
from pathlib import Path

from jobfeed.config.loader import validate_config_file


def main() -> int:
    config_file = Path(sys.argv[1]) if len(sys.argv) > 1 else Path("config.example.yaml")
    return 0 if validate_config_file(config_file) else 1


if __name__ == "__main__":
    sys.exit(main())
