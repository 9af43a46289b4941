"""
Workflow - Review generated metadata before publishing
"""
import asyncio
from archiveflow import ArchiveClient, UploadFile


async def main():
    async with ArchiveClient("credentials") as ia:
        flow = ia.workflow()
        flow.on('state', lambda step: print(f"-> {step}"))
        flow.on('credentials_required', lambda: print("Run `archiveflow login` first"))

        flow.select_file(
            UploadFile.from_path("deep_dive.mp3"),
            context="Sources: https://example.com/paper"
        )

        # Wait for the draft, then tweak it
        metadata = await flow.metadata_ready()
        print(f"Draft title: {metadata.title}")
        flow.update_metadata(tags=metadata.tags + ("research",))

        if await flow.publish():
            flow.on('tick', lambda s: print(f"\rwaiting {s}s", end=""))
            try:
                await asyncio.wait_for(flow.wait_verified(), timeout=120)
            except asyncio.TimeoutError:
                flow.skip_verification()
            print(f"\nDone: {flow.state.url}")

        await flow.close()


if __name__ == "__main__":
    asyncio.run(main())
