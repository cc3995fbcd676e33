"""NPB attendance tracker.

Scrapes the monthly schedule pages on npb.jp into a local database, records
the games you attended and reports how your team did when you were there.

Usage
-----
python main.py scrape 2024            # every month of 2024
python main.py scrape 2024 4          # April 2024 only
python main.py scrape 2024 4 2024-04-15
python main.py scrape 2024 --date 2024-04-15   # one day, month taken from the date
python main.py visit add 2024-04-15-巨人-阪神 --memo "Opening weekend"
python main.py stats 巨人 --season 2024
python main.py export attendance.xlsx

The database defaults to ``sqlite:///kansen.db`` and can be changed with
``--database`` or the ``KANSEN_DATABASE_URL`` environment variable.
"""
from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import List, Optional, Sequence

from kansen.aggregator import summarize_attendance
from kansen.errors import InputValidationError, KansenError
from kansen.export import write_excel
from kansen.models import is_known_team
from kansen.pipeline import MonthResult, scrape_season
from kansen.store import DEFAULT_DATABASE_URL, GameStore

logger = logging.getLogger(__name__)


def _report(results: List[MonthResult]) -> bool:
    all_ok = True
    for result in results:
        label = f"{result.year}-{result.month:02d}"
        if not result.ok:
            all_ok = False
            print(f"{label}: {result.error}: {result.message}")
        elif result.empty:
            target = f" on {result.target_date}" if result.target_date else ""
            print(f"{label}: no games found{target}")
        else:
            print(f"{label}: extracted {result.extracted}, stored {result.reconciled}")
    return all_ok


def _cmd_scrape(args: argparse.Namespace, store: GameStore) -> int:
    if args.date and args.date_option:
        raise InputValidationError("Give the date either positionally or with --date, not both")
    results = scrape_season(args.year, args.month, args.date_option or args.date, store=store)
    return 0 if _report(results) else 1


def _cmd_visit_add(args: argparse.Namespace, store: GameStore) -> int:
    visit = store.add_visit(args.game_code, place=args.place, memo=args.memo)
    print(f"Recorded visit {visit.id}: {args.game_code} at {visit.place}")
    return 0


def _cmd_visit_list(args: argparse.Namespace, store: GameStore) -> int:
    visits = store.list_visits(
        season=args.season,
        team=args.team,
        opponent=args.opponent,
        newest_first=args.newest_first,
    )
    for visit in visits:
        game = visit.game
        if game is None:
            print(f"{visit.id}\t(game removed)\t{visit.place}")
            continue
        score = "-" if not game.is_final else f"{game.home_score}-{game.away_score}"
        print(f"{visit.id}\t{game.date}\t{game.home_team} vs {game.away_team}\t{score}\t{visit.place}")
    return 0


def _cmd_visit_delete(args: argparse.Namespace, store: GameStore) -> int:
    removed = store.delete_visits(args.ids)
    print(f"Deleted {removed} visit records")
    return 0


def _cmd_stats(args: argparse.Namespace, store: GameStore) -> int:
    if not is_known_team(args.team):
        logger.warning("%s is not in the NPB team list", args.team)
    season = args.season
    if season is None:
        seasons = store.available_seasons()
        season = seasons[0] if seasons else None
    visits = store.list_visits(season=season)
    summary = summarize_attendance(visits, args.team, season=season, opponent=args.opponent)
    print(
        f"{summary.team} {summary.season or 'all seasons'}: "
        f"{summary.wins}W {summary.losses}L {summary.draws}D "
        f"({summary.formatted_percentage}) in {summary.games} games attended"
    )
    return 0


def _cmd_cleanup(args: argparse.Namespace, store: GameStore) -> int:
    removed = store.delete_unreferenced_games()
    print(f"Deleted {removed} unreferenced games")
    return 0


def _cmd_export(args: argparse.Namespace, store: GameStore) -> int:
    write_excel(
        store.list_games(season=args.season),
        store.list_visits(season=args.season),
        args.output,
    )
    logger.info("Wrote %s", args.output.resolve())
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description=__doc__, formatter_class=argparse.RawDescriptionHelpFormatter)
    parser.add_argument(
        "--database",
        default=DEFAULT_DATABASE_URL,
        help="SQLAlchemy database URL (default: %(default)s)",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable debug logging for detailed progress information.",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress informational output, showing only warnings and errors.",
    )
    commands = parser.add_subparsers(dest="command", required=True)

    scrape = commands.add_parser("scrape", help="Scrape schedule pages into the database.")
    scrape.add_argument("year", help="Season to scrape, e.g. 2024.")
    scrape.add_argument("month", nargs="?", help="Month 1-12 (default: all months).")
    scrape.add_argument("date", nargs="?", help="Only store games on this YYYY-MM-DD date.")
    scrape.add_argument(
        "--date",
        dest="date_option",
        metavar="DATE",
        help="Only store games on this YYYY-MM-DD date; the month defaults to the date's month.",
    )
    scrape.set_defaults(handler=_cmd_scrape)

    visit = commands.add_parser("visit", help="Manage visit records.")
    visit_commands = visit.add_subparsers(dest="visit_command", required=True)

    add = visit_commands.add_parser("add", help="Record a visit to a stored game.")
    add.add_argument("game_code", help="Game code, e.g. 2024-04-15-巨人-阪神.")
    add.add_argument("--place", help="Where you watched (default: the stadium).")
    add.add_argument("--memo", help="Free-form note.")
    add.set_defaults(handler=_cmd_visit_add)

    listing = visit_commands.add_parser("list", help="List visit records.")
    listing.add_argument("--season", type=int)
    listing.add_argument("--team")
    listing.add_argument("--opponent")
    listing.add_argument("--newest-first", action="store_true")
    listing.set_defaults(handler=_cmd_visit_list)

    remove = visit_commands.add_parser("delete", help="Delete visit records by id.")
    remove.add_argument("ids", type=int, nargs="+")
    remove.set_defaults(handler=_cmd_visit_delete)

    stats = commands.add_parser("stats", help="Win/loss record of a team in attended games.")
    stats.add_argument("team")
    stats.add_argument("--season", type=int, help="Season (default: latest with visits).")
    stats.add_argument("--opponent")
    stats.set_defaults(handler=_cmd_stats)

    cleanup = commands.add_parser("cleanup", help="Delete games without visit records.")
    cleanup.set_defaults(handler=_cmd_cleanup)

    export = commands.add_parser("export", help="Write games and visits to an Excel workbook.")
    export.add_argument("output", type=Path)
    export.add_argument("--season", type=int)
    export.set_defaults(handler=_cmd_export)

    return parser


def run(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.verbose and args.quiet:
        parser.error("--verbose and --quiet are mutually exclusive")

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING if args.quiet else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%H:%M:%S",
    )

    try:
        store = GameStore(args.database)
        return args.handler(args, store)
    except KansenError as exc:
        logger.error("%s", exc)
        return 2


def main() -> None:
    raise SystemExit(run())


if __name__ == "__main__":
    main()
