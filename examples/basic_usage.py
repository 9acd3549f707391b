"""Basic usage example for pysparkcloud library."""

import asyncio

from pysparkcloud import SparkClient


async def main() -> None:
    """Demonstrate basic usage of pysparkcloud."""
    # Initialize client with credentials; a token is issued on entry
    async with SparkClient(
        username="your@email.com",
        password="your_password",
    ) as client:
        error, devices = await client.list_devices()
        if error is not None:
            print(f"Could not list devices ({error.kind}): {error}")
            return

        print(f"Found {len(devices)} device(s)")

        for entry in devices:
            print(f"\nDevice: {entry['name']}")
            print(f"  ID: {entry['id']}")
            print(f"  Connected: {entry.get('connected')}")

            if not entry.get("connected"):
                continue

            core = client.device(entry["id"])

            error, info = await core.info()
            if error is None:
                print(f"  Variables: {', '.join(info.get('variables') or {})}")
                print(f"  Functions: {', '.join(info.get('functions') or [])}")

            print("Turning LED on...")
            error, result = await core.call_function("led", "on")
            if error is not None and error.kind == "action_failed":
                print(f"  Device refused the call: {result}")
            elif error is not None:
                print(f"  Call failed ({error.kind}): {error}")
            else:
                print(f"  Return value: {result['return_value']}")


if __name__ == "__main__":
    asyncio.run(main())
