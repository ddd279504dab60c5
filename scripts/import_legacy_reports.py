#!/usr/bin/env python3
"""
Import legacy flat report documents (JSON lines, e.g. a mongoexport dump) into the
reports table using the canonical report shape.
"""

import asyncio
import json
import os
import sys

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from core.db import AsyncSessionLocal
from core.errors import ValidationError
from core.legacy import legacy_report_fields
from models.report import Report


async def import_reports(path: str, dry_run: bool = False) -> tuple[int, int]:
    """
    Convert and insert every document in `path`.

    Invalid documents are reported and skipped; valid ones are inserted in one
    transaction.

    Returns:
        (imported, skipped)
    """
    imported = 0
    skipped = 0

    async with AsyncSessionLocal() as db:
        with open(path, encoding="utf-8") as f:
            for line_no, line in enumerate(f, start=1):
                if not line.strip():
                    continue
                try:
                    fields = legacy_report_fields(json.loads(line))
                except (ValueError, KeyError, ValidationError) as e:
                    # json.JSONDecodeError is a ValueError
                    print(f"❌ line {line_no}: {e}")
                    skipped += 1
                    continue

                db.add(Report(**fields))
                imported += 1

        if dry_run:
            await db.rollback()
        else:
            await db.commit()

    return imported, skipped


async def main() -> None:
    """Main function."""
    args = [a for a in sys.argv[1:] if a != "--dry-run"]
    if len(args) != 1:
        print("Usage:")
        print(f"  {sys.argv[0]} <reports.jsonl> [--dry-run]")
        return

    imported, skipped = await import_reports(args[0], dry_run="--dry-run" in sys.argv)
    verb = "Would import" if "--dry-run" in sys.argv else "Imported"
    print(f"✅ {verb} {imported} report(s), skipped {skipped}")


if __name__ == "__main__":
    # Load environment variables
    from dotenv import load_dotenv

    load_dotenv()

    asyncio.run(main())
