import argparse
import json
import logging
from dataclasses import asdict
from typing import Callable, List, Optional, Sequence

import httpx
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from deathmountain.application.contract import CONTEXT_KEYS, OUTPUT_FORMATS
from deathmountain.application.services.context_serializer import (
    estimate_tokens,
    render_context,
    render_error,
    to_payload,
)
from deathmountain.application.services.game_state_service import GameStateService
from deathmountain.domain.errors import GameNotFoundError, RowSchemaError, UpstreamQueryError
from deathmountain.domain.models.game_state import GamePhase, GameState, LeaderboardEntry
from deathmountain.infrastructure.resilient_http import CircuitOpenError


EXIT_OK = 0
EXIT_NOT_FOUND = 1
EXIT_UPSTREAM_ERROR = 2

_BORDER_BY_PHASE = {
    GamePhase.DEATH.value: "red",
    GamePhase.COMBAT.value: "bright_red",
    GamePhase.LEVEL_UP.value: "cyan",
    GamePhase.EXPLORATION.value: "green",
}

_logger = logging.getLogger(__name__)


def _parse_keys(raw: str | None) -> Optional[List[str]]:
    if not raw:
        return None
    keys = [part.strip() for part in raw.split(",") if part.strip()]
    unknown = [key for key in keys if key not in CONTEXT_KEYS]
    if unknown:
        raise argparse.ArgumentTypeError(f"Unknown keys: {', '.join(unknown)}. Allowed: {', '.join(CONTEXT_KEYS)}")
    return keys


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="deathmountain", description="Death Mountain game-state context tool.")
    parser.add_argument("--fixture", help="Read rows from a JSON fixture instead of the Torii indexer.")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging.")
    commands = parser.add_subparsers(dest="command", required=True)

    context = commands.add_parser("context", help="Render the current context for a game.")
    context.add_argument("game_id", type=int)
    context.add_argument("--format", choices=OUTPUT_FORMATS, default="xml")
    context.add_argument("--keys", type=_parse_keys, default=None, help="Comma separated subset of JSON keys.")

    leaderboard = commands.add_parser("leaderboard", help="List the best fallen adventurers.")
    leaderboard.add_argument("--limit", type=int, default=10)
    leaderboard.add_argument("--format", choices=("json", "summary"), default="summary")
    return parser


def render_summary(state: GameState, console: Console) -> None:
    adventurer = state.adventurer
    phase = state.phase.value if isinstance(state.phase, GamePhase) else str(state.phase)

    header = Table.grid(padding=(0, 1))
    header.add_row("Phase", phase)
    outlook = state.outlook
    if outlook is not None:
        header.add_row("Health", f"{adventurer.health}/{outlook.max_health}")
        header.add_row("Level", f"{adventurer.level} ({adventurer.xp} XP, {outlook.level_progress:g}% to next)")
        header.add_row("Potion", f"{outlook.potion_price}g")
    else:
        header.add_row("Health", str(adventurer.health))
        header.add_row("Level", f"{adventurer.level} ({adventurer.xp} XP)")
    header.add_row("Gold", str(adventurer.gold))
    if state.beast is not None:
        header.add_row("Beast", f"{state.beast.name} L{state.beast.level} T{state.beast.tier} ({state.beast.health} HP)")
    if state.combat_preview is not None:
        preview = state.combat_preview
        header.add_row(
            "Damage",
            f"{preview.player_damage.base}/{preview.player_damage.critical} dealt, {preview.beast_damage.max} max taken",
        )
        header.add_row("Flee", f"{preview.flee_chance}%")
        header.add_row("Estimate", preview.outcome.summary)
    console.print(
        Panel(
            header,
            title=f"[bold yellow]Game {state.game_id}[/bold yellow]",
            subtitle=f"[dim]action {state.action_count}[/dim]",
            border_style=_BORDER_BY_PHASE.get(phase, "yellow"),
        )
    )

    equipment = Table(show_header=True, header_style="bold yellow")
    equipment.add_column("Slot")
    equipment.add_column("Item")
    for slot, item in adventurer.equipment.items():
        equipment.add_row(slot, item.label if item is not None else "-")
    console.print(equipment)

    if state.recent_events:
        events = Table(show_header=True, header_style="bold yellow")
        events.add_column("Kind")
        events.add_column("Message")
        for entry in state.recent_events:
            events.add_row(entry.kind, entry.message)
        console.print(events)


def render_leaderboard(entries: Sequence[LeaderboardEntry], console: Console) -> None:
    table = Table(show_header=True, header_style="bold yellow", title="Leaderboard")
    table.add_column("#", justify="right")
    table.add_column("Adventurer", justify="right")
    table.add_column("Level", justify="right")
    table.add_column("XP", justify="right")
    for entry in entries:
        table.add_row(str(entry.rank), str(entry.adventurer_id), str(entry.level), str(entry.xp))
    console.print(table)


def run(
    argv: Sequence[str] | None,
    service_factory: Callable[[argparse.Namespace], GameStateService],
    *,
    console: Console | None = None,
    out: Callable[[str], None] = print,
) -> int:
    args = build_parser().parse_args(argv)
    if args.verbose:
        logging.basicConfig(level=logging.DEBUG)
    console = console or Console()
    service = service_factory(args)

    if args.command == "leaderboard":
        try:
            entries = service.get_leaderboard(args.limit)
        except (httpx.HTTPError, CircuitOpenError, UpstreamQueryError) as exc:
            _logger.error("Leaderboard query failed", extra={"error": str(exc)})
            out(json.dumps({"error": str(exc)}))
            return EXIT_UPSTREAM_ERROR
        if args.format == "json":
            out(json.dumps([asdict(entry) for entry in entries]))
        else:
            render_leaderboard(entries, console)
        return EXIT_OK

    try:
        state = service.get_game_state(args.game_id)
    except GameNotFoundError as exc:
        out(render_error(str(exc), args.game_id))
        return EXIT_NOT_FOUND
    except (httpx.HTTPError, CircuitOpenError, UpstreamQueryError, RowSchemaError) as exc:
        _logger.error("Game state query failed", extra={"game_id": args.game_id, "error": str(exc)})
        out(render_error(str(exc), args.game_id))
        return EXIT_UPSTREAM_ERROR

    if args.format == "json":
        out(json.dumps(to_payload(state, args.keys)))
    elif args.format == "summary":
        render_summary(state, console)
    else:
        context = render_context(state)
        _logger.debug(
            "Rendered context",
            extra={"game_id": args.game_id, "phase": GamePhase(state.phase).value, "tokens": estimate_tokens(context)},
        )
        out(context)
    return EXIT_OK
