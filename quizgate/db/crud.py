from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import func, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from quizgate.db.models import KVEntry
from typing import Any, Optional

_UPSERTS = {"sqlite": sqlite_insert, "postgresql": pg_insert}

async def get_entry(db: AsyncSession, key: str) -> Optional[KVEntry]:
    res = await db.execute(select(KVEntry).where(KVEntry.key == key))
    return res.scalar_one_or_none()

async def put_entry(db: AsyncSession, key: str, value: Any) -> None:
    # single-statement upsert: concurrent first writes to a key race on value, never on the row
    insert = _UPSERTS.get(db.get_bind().dialect.name)
    if insert is None:
        await _put_entry_portable(db, key, value)
        return
    stmt = insert(KVEntry).values(key=key, value=value)
    stmt = stmt.on_conflict_do_update(
        index_elements=[KVEntry.key],
        set_={"value": stmt.excluded["value"], "updated_at": func.now()},
    )
    await db.execute(stmt)
    await db.commit()

async def _put_entry_portable(db: AsyncSession, key: str, value: Any) -> None:
    entry = await get_entry(db, key)
    if entry is None:
        db.add(KVEntry(key=key, value=value))
    else:
        entry.value = value
    await db.commit()
