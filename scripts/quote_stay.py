"""Print availability and a price quote for a bungalow stay as JSON."""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
import uuid
from collections.abc import Sequence
from datetime import date
from decimal import Decimal

from bungalow_pricing.core.config import parse_tax_rate
from bungalow_pricing.core.errors import ConflictError, PricingError
from bungalow_pricing.core.logging import configure_logging
from bungalow_pricing.db.session import get_sessionmaker
from bungalow_pricing.services.pricing_engine import PricingEngine
from bungalow_pricing.services.pricing_types import ExtraSelection, QuoteRequest


def _parse_extra(raw: str) -> ExtraSelection:
    code, _, qty = raw.partition(":")
    try:
        return ExtraSelection(code=code, quantity=int(qty or 1))
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid extra {raw!r}") from exc


def _parse_tax_rate(raw: str) -> Decimal:
    try:
        return parse_tax_rate(raw)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(str(exc)) from exc


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("bungalow_id", type=uuid.UUID)
    parser.add_argument("check_in", type=date.fromisoformat)
    parser.add_argument("check_out", type=date.fromisoformat)
    parser.add_argument("--guests", type=int, default=2)
    parser.add_argument(
        "--extra",
        action="append",
        default=[],
        type=_parse_extra,
        help="CODE[:QTY], repeatable",
    )
    parser.add_argument(
        "--tax-rate", default=None, type=_parse_tax_rate, help="override TAX_RATE"
    )
    parser.add_argument(
        "--availability-only",
        action="store_true",
        help="only report blocked dates",
    )
    return parser


async def run(args: argparse.Namespace) -> int:
    sessionmaker = get_sessionmaker()
    async with sessionmaker() as session:
        engine = PricingEngine.from_session(session, tax_rate=args.tax_rate)
        if args.availability_only:
            result = await engine.check_availability(
                args.bungalow_id, args.check_in, args.check_out
            )
            print(
                json.dumps(
                    {
                        "status": result.status.value,
                        "reason": result.reason,
                        "blocked_dates": [d.isoformat() for d in result.blocked_dates],
                    },
                    indent=2,
                )
            )
            return 0 if result.available else 1

        request = QuoteRequest(
            unit_id=args.bungalow_id,
            check_in=args.check_in,
            check_out=args.check_out,
            guests=args.guests,
            extras=tuple(args.extra),
        )
        try:
            quote = await engine.calculate_pricing(request)
        except ConflictError as exc:
            print(
                json.dumps(
                    {
                        "error": str(exc),
                        "blocked_dates": [d.isoformat() for d in exc.blocked_dates],
                    },
                    indent=2,
                ),
                file=sys.stderr,
            )
            return 1
        except PricingError as exc:
            print(json.dumps({"error": str(exc)}, indent=2), file=sys.stderr)
            return 2
        print(json.dumps(quote.to_dict(), indent=2))
        return 0


def main(argv: Sequence[str] | None = None) -> int:
    configure_logging()
    args = build_parser().parse_args(argv)
    return asyncio.run(run(args))


if __name__ == "__main__":
    raise SystemExit(main())
