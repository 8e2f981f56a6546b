#!/usr/bin/env python3
"""
Entry point for running wordtemplate as a module with python3 -m wordtemplate
"""

from .cli import main

if __name__ == "__main__":
    main()
