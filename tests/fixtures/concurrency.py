"""
Helpers for forcing an interleaving between concurrent service calls
"""

import asyncio


def hold_until_all_arrive(func, parties: int = 2):
    """
    Wrap an async function so each caller waits after it returns until
    `parties` callers have all completed the call.

    Patching a repo read with this makes concurrent services all act on the
    same snapshot before any of them writes.
    """
    arrived = []
    released = asyncio.Event()

    async def wrapper(*args, **kwargs):
        result = await func(*args, **kwargs)
        arrived.append(result)
        if len(arrived) >= parties:
            released.set()
        await asyncio.wait_for(released.wait(), timeout=10)
        return result

    return wrapper
