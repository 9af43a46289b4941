"""
Basic usage - Log in and publish one file
"""
import asyncio
from archiveflow import ArchiveClient


async def main():
    # Session mode (saves keys to credentials.session)
    async with ArchiveClient("credentials") as ia:

        if ia.keys is None:
            verified = await ia.login("YOUR_ACCESS_KEY", "YOUR_SECRET_KEY")
            print(f"Keys saved (verified: {verified})")

        result = await ia.upload(
            "episode.mp3",
            title="Episode 1",
            tags=["podcast", "ai"],
            on_progress=lambda p: print(f"\r{p:.0f}%", end="")
        )
        print(f"\nPublished: {result.url}")

        state = await ia.wait_for_derivative(result.identifier)
        print(f"Playable after {state.elapsed_formatted}")


if __name__ == "__main__":
    asyncio.run(main())
