#!/usr/bin/env python3
"""
Module entry point for scripts.mention_finder
Enables: python -m scripts.mention_finder
"""
import sys

from .scanner import main

if __name__ == "__main__":
    sys.exit(main())
