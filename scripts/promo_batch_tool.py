from __future__ import annotations

import argparse
import asyncio
import csv
from dataclasses import dataclass
from pathlib import Path
from uuid import UUID

import structlog

from coin_collect.accounts.types import Promocode
from coin_collect.core.config import get_settings
from coin_collect.core.logging import configure_logging
from coin_collect.economy.promo.batch import generate_promocode_ids
from coin_collect.remote.errors import RemoteValueNotFoundError
from coin_collect.remote.redis_client import close_redis, init_redis
from coin_collect.remote.store import RedisAccountStore

logger = structlog.get_logger(__name__)


@dataclass(slots=True)
class RawPromo:
    promocode_id: UUID
    multiplier: int
    inserted: bool = False


def _load_ids_from_csv(path: Path) -> list[UUID]:
    rows: list[UUID] = []
    with path.open("r", encoding="utf-8", newline="") as file:
        reader = csv.DictReader(file)
        if "promocode_id" in (reader.fieldnames or []):
            for row in reader:
                raw = (row.get("promocode_id") or "").strip()
                if raw:
                    rows.append(UUID(raw))
            return rows

    with path.open("r", encoding="utf-8", newline="") as file:
        for line in file:
            raw = line.strip()
            if raw:
                rows.append(UUID(raw))
    return rows


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Promocode batch generation/import tool")
    parser.add_argument("--multiplier", type=int, required=True)
    parser.add_argument("--import-csv", type=Path)
    parser.add_argument("--count", type=int)
    parser.add_argument("--output-csv", type=Path)
    parser.add_argument("--dry-run", action="store_true")
    return parser.parse_args(argv)


def _validate_args(args: argparse.Namespace) -> None:
    if args.import_csv and args.count:
        raise ValueError("use either --import-csv or --count")
    if not args.import_csv and not args.count:
        raise ValueError("one of --import-csv or --count is required")
    if args.multiplier < 1:
        raise ValueError("--multiplier must be positive")


def _build_batch(args: argparse.Namespace) -> list[RawPromo]:
    if args.import_csv:
        promocode_ids = _load_ids_from_csv(args.import_csv)
    else:
        promocode_ids = generate_promocode_ids(count=args.count)

    if not promocode_ids:
        raise ValueError("no promocodes to process")
    if len(set(promocode_ids)) != len(promocode_ids):
        raise ValueError("duplicate promocode in batch")
    return [
        RawPromo(promocode_id=promocode_id, multiplier=args.multiplier)
        for promocode_id in promocode_ids
    ]


async def _insert_batch(store: RedisAccountStore, batch: list[RawPromo]) -> None:
    for item in batch:
        try:
            await store.get_promocode(item.promocode_id)
        except RemoteValueNotFoundError:
            continue
        raise ValueError(f"promocode already exists: {item.promocode_id}")

    for item in batch:
        await store.store_promocode(Promocode(id=item.promocode_id, multiplier=item.multiplier))
        item.inserted = True


def _write_output(path: Path, batch: list[RawPromo]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8", newline="") as file:
        writer = csv.writer(file)
        writer.writerow(["promocode_id", "multiplier", "inserted"])
        for item in batch:
            writer.writerow([str(item.promocode_id).upper(), item.multiplier, int(item.inserted)])


async def _run(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    _validate_args(args)
    settings = get_settings()
    configure_logging(settings.log_level, app_env=settings.app_env)
    batch = _build_batch(args)

    if not args.dry_run:
        store = RedisAccountStore(await init_redis(settings.redis_url))
        try:
            await _insert_batch(store, batch)
        finally:
            await close_redis()

    output_csv = args.output_csv or Path("reports/promocode_batch_output.csv")
    _write_output(output_csv, batch)
    logger.info(
        "promocode_batch_processed",
        processed=len(batch),
        inserted=sum(1 for item in batch if item.inserted),
        output=str(output_csv),
    )
    return 0


def main(argv: list[str] | None = None) -> int:
    return asyncio.run(_run(argv))


if __name__ == "__main__":
    raise SystemExit(main())
