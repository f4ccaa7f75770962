"""Declares the launcher's control flags as keyword-only parameters."""


def main(Name: str, ScriptName: str = "", *, verbose: bool = False, debug: bool = False):
    return {"name": Name, "verbose": verbose, "debug": debug}
