from __future__ import annotations

import argparse
import asyncio

from glasscase.jobs.monitor import run_monitor
from glasscase.logging import configure_logging


async def main(item_id: str | None) -> int:
    report = await run_monitor(item_id)
    print(report.model_dump_json(by_alias=True, indent=2))
    return report.total_new_listings


if __name__ == "__main__":
    ap = argparse.ArgumentParser(description="Check wish-list searches for new eBay listings")
    ap.add_argument("--item", default=None, help="Single wish-list item id (default: all active items)")
    args = ap.parse_args()
    configure_logging()
    asyncio.run(main(args.item))
