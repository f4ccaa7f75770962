"""Always fails after printing a progress line."""


def main(Count: int = 3, ScriptName: str = ""):
    print(f"checking {Count} queues")
    raise ValueError("printer queue is jammed")
