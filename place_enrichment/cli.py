"""
CLI del pipeline (ejecutar como job: cron / scheduler).

Uso:
  place-enrichment scan data/place_ids.json
  place-enrichment enrich data/place_ids.json
  place-enrichment enrich data/place_ids.json --all-tiers
  place-enrichment enrich data/place_ids.json --date 2026-10-01

Variables de entorno requeridas:
  - GOOGLE_API_KEY
  - DATABASE_URL (postgresql+asyncpg://...) o DATABASE_* por componentes
  - OPENAI_API_KEY (opcional: sin ella no se traduce)
"""
from __future__ import annotations

import argparse
import asyncio
from datetime import date
from typing import Optional, Sequence

from dotenv import load_dotenv
from loguru import logger

# Cargar variables desde .env (si existe) antes de instanciar settings.
load_dotenv(override=False)

from place_enrichment.application.services.refresh_tiers import ALL_TIERS, tiers_for_date
from place_enrichment.application.services.work_list import load_work_items
from place_enrichment.core.config import settings
from place_enrichment.core.logging import configure_logging
from place_enrichment.infrastructure.database.session import close_db, create_engine, create_session_factory
from place_enrichment.shared.exceptions.base import AppException


DEFAULT_WORK_LIST = "data/place_ids.json"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="place-enrichment")
    parser.add_argument("--verbose", "-v", action="store_true", help="Mostrar mensajes de debug")
    subparsers = parser.add_subparsers(dest="command", required=True)

    scan = subparsers.add_parser("scan", help="Descubre atributos nuevos (se crean inactivos)")
    scan.add_argument("work_list", nargs="?", default=DEFAULT_WORK_LIST, help="Archivo JSON de Place IDs")

    enrich = subparsers.add_parser("enrich", help="Materializa valores de atributos activos")
    enrich.add_argument("work_list", nargs="?", default=DEFAULT_WORK_LIST, help="Archivo JSON de Place IDs")
    enrich.add_argument(
        "--date",
        type=date.fromisoformat,
        default=None,
        help="Fecha de la corrida (YYYY-MM-DD) para calcular los tiers; default: hoy",
    )
    enrich.add_argument(
        "--all-tiers",
        action="store_true",
        help="Refrescar todos los tiers (every_run, weekly, monthly)",
    )
    return parser


def resolve_tiers(args: argparse.Namespace):
    """Tiers activos de la corrida: se calculan una sola vez aquí."""
    if args.all_tiers:
        return ALL_TIERS
    return tiers_for_date(
        args.date or date.today(),
        weekly_weekday=settings.WEEKLY_REFRESH_WEEKDAY,
        monthly_day=settings.MONTHLY_REFRESH_DAY,
    )


async def _run(args: argparse.Namespace) -> int:
    # Import diferido: el CLI parsea argumentos sin requerir drivers de DB/HTTP
    from place_enrichment.bootstrap import (
        build_discovery_use_case,
        build_enrichment_use_case,
        build_places_client,
        build_translator,
    )

    items = load_work_items(args.work_list)
    if not items:
        logger.warning("No se encontraron Place IDs válidos.")
        return 0

    engine = create_engine()
    session_factory = create_session_factory(engine)
    try:
        async with build_places_client() as places:
            if args.command == "scan":
                use_case = build_discovery_use_case(session_factory, places)
                report = await use_case.scan(items)
                return 0 if report.keys_failed == 0 else 1

            tiers = resolve_tiers(args)
            use_case = build_enrichment_use_case(session_factory, places, build_translator())
            report = await use_case.run(items, tiers)
            return 0 if report.entities_failed == 0 else 1
    finally:
        await close_db(engine)


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging("DEBUG" if args.verbose else None)

    try:
        return asyncio.run(_run(args))
    except AppException as e:
        logger.error(f"{e.error_code}: {e.message}")
        return 2


if __name__ == "__main__":
    raise SystemExit(main())
