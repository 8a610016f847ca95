#!/usr/bin/env python
"""Check that the component tables exist and show what is in them.

Prints the ui_components column layout, its row count and a few sample
rows, then whether component_usage exists. Exits non-zero on failure.

Usage:
    python scripts/check_components.py
"""

import asyncio
import sys

from sqlalchemy import func, inspect, select
from sqlalchemy.ext.asyncio import AsyncConnection

from roome.database import get_engine
from roome.models import UIComponent

SAMPLE_SIZE = 5


async def check_tables(conn: AsyncConnection) -> bool:
    tables = await conn.run_sync(lambda sync_conn: inspect(sync_conn).get_table_names())

    if "ui_components" not in tables:
        print("ui_components table DOES NOT EXIST")
        print("Run: alembic upgrade head")
        return False

    print("ui_components table EXISTS")
    print("\nTable structure:")
    columns = await conn.run_sync(
        lambda sync_conn: inspect(sync_conn).get_columns("ui_components")
    )
    for col in columns:
        nullable = "(nullable)" if col["nullable"] else "(NOT NULL)"
        print(f"  - {col['name']}: {col['type']} {nullable}")

    count = (await conn.execute(select(func.count()).select_from(UIComponent))).scalar_one()
    print(f"\nRecords in table: {count}")

    if count:
        print("\nSample records:")
        rows = await conn.execute(
            select(
                UIComponent.id,
                UIComponent.name,
                UIComponent.display_name,
                UIComponent.category,
                UIComponent.component_type,
                UIComponent.is_active,
                UIComponent.created_at,
            ).limit(SAMPLE_SIZE)
        )
        for index, row in enumerate(rows, start=1):
            print(f"{index}. {row.display_name or row.name} ({row.category}/{row.component_type})")
            print(f"   ID: {row.id}, Active: {row.is_active}, Created: {row.created_at}")

    if "component_usage" in tables:
        print("\ncomponent_usage table also EXISTS")
    else:
        print("\ncomponent_usage table DOES NOT EXIST")
    return True


async def main() -> int:
    engine = get_engine()
    try:
        async with engine.connect() as conn:
            ok = await check_tables(conn)
    except Exception as e:
        print(f"Error checking tables: {e}")
        return 1
    finally:
        await engine.dispose()
    return 0 if ok else 1


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
