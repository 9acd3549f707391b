"""Example showing session injection for applications that own an aiohttp session."""

import asyncio

from aiohttp import ClientSession

from pysparkcloud import SparkClient


async def main() -> None:
    """Demonstrate sharing an application-managed session."""
    async with ClientSession() as session:
        print("Using application-managed aiohttp session")

        # Client will use the provided session instead of creating its own
        client = SparkClient(
            "your-access-token",
            session=session,  # Inject existing session
        )

        async with client:
            error, devices = await client.list_devices()
            if error is None:
                print(f"Found {len(devices)} device(s) using injected session")
                for entry in devices:
                    print(f"  - {entry['name']} ({entry['id']})")

        # Session remains open after client exits
        print("\nClient closed, but session still available for other requests")


if __name__ == "__main__":
    asyncio.run(main())
