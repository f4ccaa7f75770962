"""Reports the shapes it received."""


def main(Options: dict, Tray: object, Tags: list, ScriptName: str = ""):
    return {
        "options_type": type(Options).__name__,
        "options": Options,
        "tray_type": type(Tray).__name__,
        "tags": Tags,
    }
