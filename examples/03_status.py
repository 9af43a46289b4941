"""
Status - Check whether an item finished processing
"""
import asyncio
import sys
from archiveflow import ArchiveClient, setup_logging


async def main(identifier: str):
    setup_logging()

    async with ArchiveClient() as ia:
        item = await ia.status(identifier)

        print(f"Exists: {item.exists}")
        print(f"Files:  {item.file_count}")
        print(f"Ready:  {item.ready}")
        for fmt in item.formats:
            print(f"  {fmt}")


if __name__ == "__main__":
    asyncio.run(main(sys.argv[1]))
