#!/usr/bin/env python3
"""
Convenience shim to run nyaaseek from a source checkout.
Usage: python nyaaseek.py MEDIA_ID [--downloaded 1,2] [--config PATH]
"""

from nyaaseek.cli import main


if __name__ == "__main__":
    main()
