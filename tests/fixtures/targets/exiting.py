"""Exits with a non-zero status instead of returning."""

import sys


def main(ScriptName: str = ""):
    sys.exit(4)
