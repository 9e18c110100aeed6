"""
Entry point for ``python -m layer1_digital``.
"""
import sys

from layer1_digital.cli import main

if __name__ == "__main__":
    sys.exit(main())
