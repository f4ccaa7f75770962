"""Coroutine entrypoint."""

import asyncio


async def main(Delay: float = 0.0, ScriptName: str = ""):
    await asyncio.sleep(Delay)
    return "done"
