"""Select a printer and report the job settings."""


def main(PrinterName: str, PrinterColor: str, ScriptName: str = "", Tasks: str = "", PaperSize: str = "A4"):
    print(f"Selecting printer {PrinterName} for {ScriptName}")
    return [PrinterName, PrinterColor, ScriptName, Tasks, PaperSize]


if __name__ == "__main__":
    raise SystemExit("run me through launchpad")
