#!/usr/bin/env python3
"""
SpeechSync Entry Point Script

This script initializes the CLI handler and runs the speech and subtitle generation process.
"""

import sys
from speechsync.cli import CLIHandler

if __name__ == "__main__":
    if sys.version_info < (3, 8):
        sys.stderr.write("SpeechSync requires Python 3.8 or later.\n")
        sys.exit(1)

    cli = CLIHandler()
    sys.exit(cli.run())
