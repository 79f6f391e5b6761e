import os
import json
import asyncio
import signal
import socket
import logging
import redis.asyncio as redis
from datetime import date
from sqlalchemy.ext.asyncio import async_sessionmaker, AsyncSession
from sqlalchemy import text, bindparam
from sqlalchemy.dialects.postgresql import JSONB, INET
from sqlalchemy.exc import SQLAlchemyError
from app.core.config import Settings
from app.core.database import create_engine, create_sessionmaker
from app.core.logging_config import setup_logging
from app.core.redis import create_redis


logger = logging.getLogger("audit.worker")

RECLAIM_EVERY_S = 30
RECLAIM_MIN_IDLE_MS = 60_000

AUDIT_COLUMNS = (
    "request_id", "scope", "action", "actor", "actor_ip", "route", "object_type", "object_id",
    "event_id", "seat_code", "booking_date", "status", "reason", "meta",
)

INSERT_AUDIT = text(
    f"INSERT INTO audit.audit_logs ({', '.join(AUDIT_COLUMNS)}) "
    f"VALUES ({', '.join(':' + c for c in AUDIT_COLUMNS)})"
).bindparams(
    bindparam("actor_ip", type_=INET),
    bindparam("meta", type_=JSONB),
)


def parse_entry(fields: dict) -> dict:
    """Stream entry -> INSERT_AUDIT params. ValueError marks the entry as unusable."""
    raw = fields.get("json")
    record = json.loads(raw) if raw else None
    if not isinstance(record, dict):
        raise ValueError("payload is not a JSON object")
    if not record.get("scope") or not record.get("action"):
        raise ValueError("missing required fields: scope/action")

    params = {column: record.get(column) for column in AUDIT_COLUMNS}
    params["status"] = "SUCCESS" if str(record.get("status") or "SUCCESS").upper() == "SUCCESS" else "FAIL"
    params["meta"] = dict(record.get("meta") or {})
    if params["booking_date"]:
        params["booking_date"] = date.fromisoformat(params["booking_date"])
    return params


async def store_entries(
        r: redis.Redis,
        session: async_sessionmaker[AsyncSession],
        settings: Settings,
        entries: list
) -> None:
    """
    Insert a batch, acking each stored entry. A failed insert is rolled back to its
    savepoint and left pending so the reclaim pass retries it; malformed entries are
    acked and dropped.
    """
    async with session() as db:
        async with db.begin():
            for msg_id, fields in entries:
                try:
                    params = parse_entry(fields)
                except ValueError as e:
                    logger.warning("Invalid payload; dropping id=%s err=%s", msg_id, e)
                    await r.xack(settings.audit_stream, settings.audit_group, msg_id)
                    continue
                try:
                    async with db.begin_nested():
                        await db.execute(INSERT_AUDIT, params)
                except SQLAlchemyError:
                    logger.exception("DB insert failed; keeping id=%s pending", msg_id)
                    continue
                await r.xack(settings.audit_stream, settings.audit_group, msg_id)


class AuditConsumer:
    def __init__(self, settings: Settings, r: redis.Redis, session: async_sessionmaker[AsyncSession]):
        self.settings = settings
        self.redis = r
        self.session = session
        self.name = f"{socket.gethostname()}-{os.getpid()}"
        self.stop = asyncio.Event()

    async def ensure_group(self) -> None:
        s = self.settings
        try:
            await self.redis.xgroup_create(name=s.audit_stream, groupname=s.audit_group, id="$", mkstream=True)
            logger.info("XGROUP created stream=%s group=%s", s.audit_stream, s.audit_group)
        except redis.ResponseError as e:
            if "BUSYGROUP" not in str(e):
                raise
            logger.info("XGROUP already exists stream=%s group=%s", s.audit_stream, s.audit_group)

    async def consume_new(self) -> None:
        s = self.settings
        resp = await self.redis.xreadgroup(
            groupname=s.audit_group,
            consumername=self.name,
            streams={s.audit_stream: ">"},
            count=s.audit_batch,
            block=s.audit_block_ms,
        )
        if resp:
            await store_entries(self.redis, self.session, s, resp[0][1])

    async def reclaim_pending(self) -> None:
        s = self.settings
        try:
            _, msgs, _ = await self.redis.xautoclaim(
                name=s.audit_stream,
                groupname=s.audit_group,
                consumername=self.name,
                min_idle_time=RECLAIM_MIN_IDLE_MS,
                start_id="0",
                count=100,
            )
            if msgs:
                logger.info("XAUTOCLAIM: retrying %d pending messages", len(msgs))
                await store_entries(self.redis, self.session, s, msgs)
        except (redis.RedisError, SQLAlchemyError):
            logger.exception("XAUTOCLAIM failed")

    async def run(self) -> None:
        loop = asyncio.get_running_loop()
        for sig in (signal.SIGINT, signal.SIGTERM):
            try:
                loop.add_signal_handler(sig, self.stop.set)
            except NotImplementedError:
                pass

        logger.info(
            "Audit worker started | stream=%s group=%s consumer=%s batch=%d block_ms=%d",
            self.settings.audit_stream, self.settings.audit_group, self.name,
            self.settings.audit_batch, self.settings.audit_block_ms,
        )
        last_reclaim = loop.time()
        while not self.stop.is_set():
            await self.consume_new()
            if loop.time() - last_reclaim > RECLAIM_EVERY_S:
                last_reclaim = loop.time()
                await self.reclaim_pending()


async def main(settings: Settings) -> None:
    if not settings.redis_url:
        raise SystemExit("REDIS_URL is required for the audit worker")

    r = await create_redis(settings.redis_url)
    engine = create_engine(settings.database_url)
    consumer = AuditConsumer(settings, r, create_sessionmaker(engine))
    try:
        await consumer.ensure_group()
        await consumer.run()
    finally:
        logger.info("Shutting down audit worker...")
        await r.aclose()
        await engine.dispose()
        logger.info("Audit worker stopped.")


if __name__ == "__main__":
    _settings = Settings.from_env()
    setup_logging(_settings.log_level)
    asyncio.run(main(_settings))
