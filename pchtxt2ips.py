#!/usr/bin/env python3
# -*-coding: utf-8-*-
"""
pchtxt2ips - Startup Script

Runs the command line tool from a source checkout:

    python pchtxt2ips.py game.pchtxt
"""

from pchtxt.main import main

if __name__ == "__main__":
    raise SystemExit(main())
