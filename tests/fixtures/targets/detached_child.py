"""Leaves a background process running that inherits the worker's stderr."""

import subprocess
import sys


def main(ScriptName: str = ""):
    child = subprocess.Popen([sys.executable, "-c", "import time; time.sleep(60)"], start_new_session=True)
    return child.pid
