"""Callback-style dispatch example for pysparkcloud library."""

import asyncio

from pysparkcloud import Operation, SparkClient, SparkCloudError


def on_reading(error: SparkCloudError | None, data: object) -> None:
    """Print the result of a variable read."""
    if error is not None:
        print(f"Read failed ({error.kind}): {error}")
    else:
        print(f"Reading: {data}")


async def main() -> None:
    """Fire several reads without waiting for each one."""
    async with SparkClient("your-access-token", timeout=5) as client:
        for name in ("temperature", "humidity", "pressure"):
            client.api.submit(Operation(f"devices/my-core/{name}"), callback=on_reading)

        print(f"{client.api.pending_count} read(s) in flight")
    # Leaving the context waits for the submitted reads


if __name__ == "__main__":
    asyncio.run(main())
