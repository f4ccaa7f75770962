"""Redraws a progress bar with carriage returns and no newline until the end."""

import sys


def main(ScriptName: str = ""):
    for _ in range(17 * 1024):
        sys.stderr.write("\r" + "#" * 1023)
    sys.stderr.write("\nprogress complete\n")
    return "done"
