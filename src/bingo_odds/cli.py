from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, NoReturn, Optional

import typer

from .combinatorics import TOTAL_BALLS
from .config import resolve_parameters
from .curve import ChartPoint, generate_chart_data
from .live import calculate_live_probabilities
from .logging_setup import setup_logging
from .serialize import (
    build_run_meta,
    emit_chart_csv,
    emit_chart_json,
    emit_snapshot_json,
    read_cards_json,
)
from .simulate import simulate_curve
from .version import __version__

app = typer.Typer(help="90-ball bingo win probability CLI")

logger = logging.getLogger(__name__)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(__version__)
        raise typer.Exit(0)


@app.callback()
def common_options(
    version: bool = typer.Option(
        False,
        "--version",
        help="Show application version and exit",
        is_eager=True,
        callback=_version_callback,
    ),
) -> None:
    pass


def _fail(message: str) -> NoReturn:
    typer.echo(f"Error: {message}", err=True)
    raise typer.Exit(code=2)


def _resolve(config: Optional[str], cli_overrides: Dict[str, Any]) -> tuple[Dict[str, Any], str]:
    # drop unset options so ENV/config values are not shadowed
    overrides = {k: v for k, v in cli_overrides.items() if v is not None}
    try:
        resolved, params_hash, _cfg_path = resolve_parameters(
            config_path_str=config, cli_overrides=overrides
        )
    except (FileNotFoundError, ValueError) as exc:
        _fail(str(exc))
    setup_logging(
        level=str(resolved.get("log_level", "INFO")),
        log_file=resolved.get("log_file"),
        json_format=(str(resolved.get("log_format", "text")) == "json"),
        colors=str(resolved.get("colors", "auto")),
    )
    return resolved, params_hash


def _total_cards(resolved: Dict[str, Any]) -> int:
    try:
        total = int(resolved.get("total_cards", 0))
    except (TypeError, ValueError):
        total = 0
    if total < 1:
        _fail("total_cards must be a positive integer")
    return total


def parse_drawn(raw: str) -> List[int]:
    """Parse "1, 2 3" into drawn numbers, keeping call order and dropping repeats."""
    drawn: List[int] = []
    for token in raw.replace(",", " ").split():
        try:
            value = int(token)
        except ValueError:
            raise ValueError(f"Not a ball number: {token!r}") from None
        if not 1 <= value <= TOTAL_BALLS:
            raise ValueError(f"Ball number out of range 1..{TOTAL_BALLS}: {value}")
        if value not in drawn:
            drawn.append(value)
    return drawn


def _first_draw_reaching(points: List[ChartPoint], threshold: float, attr: str) -> Optional[int]:
    for p in points:
        if getattr(p, attr) >= threshold:
            return p.draw_index
    return None


def _write_chart(out: Path, points: List[ChartPoint], total_cards: int, params_hash: str,
                 mkdirs: bool, force: bool) -> None:
    try:
        if out.suffix.lower() == ".json":
            emit_chart_json(
                out,
                points=points,
                total_cards=total_cards,
                run_meta=build_run_meta(app_version=__version__, params_hash=params_hash),
                mkdirs=mkdirs,
                overwrite=force,
            )
        else:
            emit_chart_csv(out, points=points, mkdirs=mkdirs, overwrite=force)
    except FileExistsError as exc:
        _fail(str(exc))
    typer.echo(f"Wrote {out}")


@app.command()
def chart(
    total_cards: Optional[int] = typer.Option(None, "--total-cards", help="Cards in play"),
    out: Optional[str] = typer.Option(None, "--out", help="Output .csv or .json path"),
    config: Optional[str] = typer.Option(None, "--config", help="Path to config file (YAML/JSON)"),
    log_level: Optional[str] = typer.Option(None, "--log-level", help="DEBUG|INFO|WARN|ERROR"),
    log_file: Optional[str] = typer.Option(None, "--log-file", help="Log file path"),
    force: bool = typer.Option(False, "--force", help="Overwrite outputs if they exist"),
    no_mkdirs: bool = typer.Option(False, "--no-mkdirs", help="Do not create parent directories"),
) -> None:
    """Theoretical chance that some card has a line / bingo after each draw."""
    resolved, params_hash = _resolve(
        config,
        {"total_cards": total_cards, "out": out, "log_level": log_level, "log_file": log_file},
    )
    n_cards = _total_cards(resolved)
    points = generate_chart_data(n_cards)
    logger.info("Computed theoretical curve for %d cards", n_cards)

    for label, attr in (("line", "line_probability"), ("bingo", "bingo_probability")):
        median = _first_draw_reaching(points, 0.5, attr)
        typer.echo(f"{label}: 50% reached at draw {median if median is not None else '-'}")

    if resolved.get("out"):
        _write_chart(Path(resolved["out"]), points, n_cards, params_hash, not no_mkdirs, force)


@app.command()
def live(
    cards: Optional[str] = typer.Option(None, "--cards", help="Path to cards JSON"),
    drawn: str = typer.Option("", "--drawn", help="Drawn numbers in call order, e.g. '4,17,88'"),
    total_cards: Optional[int] = typer.Option(None, "--total-cards", help="Cards in play, yours included"),
    out: Optional[str] = typer.Option(None, "--out", help="Snapshot JSON output path"),
    config: Optional[str] = typer.Option(None, "--config", help="Path to config file (YAML/JSON)"),
    log_level: Optional[str] = typer.Option(None, "--log-level", help="DEBUG|INFO|WARN|ERROR"),
    log_file: Optional[str] = typer.Option(None, "--log-file", help="Log file path"),
    force: bool = typer.Option(False, "--force", help="Overwrite outputs if they exist"),
    no_mkdirs: bool = typer.Option(False, "--no-mkdirs", help="Do not create parent directories"),
) -> None:
    """Live odds for your cards given the numbers drawn so far."""
    resolved, params_hash = _resolve(
        config,
        {
            "cards_file": cards,
            "total_cards": total_cards,
            "out": out,
            "log_level": log_level,
            "log_file": log_file,
        },
    )
    if not resolved.get("cards_file"):
        _fail("--cards is required")
    try:
        user_cards = read_cards_json(Path(resolved["cards_file"]))
        drawn_numbers = parse_drawn(drawn)
    except (OSError, ValueError) as exc:
        _fail(str(exc))
    n_cards = _total_cards(resolved)
    if n_cards < len(user_cards):
        logger.warning("total_cards=%d is below your %d cards; assuming no opponents", n_cards, len(user_cards))

    snapshot = calculate_live_probabilities(user_cards, drawn_numbers, n_cards)

    def fmt_needed(value: float) -> str:
        return "-" if value == float("inf") else str(int(value))

    typer.echo(f"Balls drawn: {len(drawn_numbers)}  remaining: {TOTAL_BALLS - len(drawn_numbers)}")
    if drawn_numbers:
        typer.echo(f"Last called: {drawn_numbers[-1]}")
    typer.echo(
        f"Line: need {fmt_needed(snapshot.needed_for_line)}"
        f"  outs {sorted(snapshot.line_outs)}"
        f"  hit {snapshot.prob_hit_line_out:.2%}"
        f"  win {snapshot.prob_user_wins_line_next_draw:.2%}"
    )
    typer.echo(
        f"Bingo: need {fmt_needed(snapshot.needed_for_bingo)}"
        f"  outs {sorted(snapshot.bingo_outs)}"
        f"  hit {snapshot.prob_hit_bingo_out:.2%}"
        f"  win {snapshot.prob_user_wins_bingo_next_draw:.2%}"
    )

    if resolved.get("out"):
        try:
            emit_snapshot_json(
                Path(resolved["out"]),
                snapshot=snapshot,
                drawn=drawn_numbers,
                total_cards=n_cards,
                run_meta=build_run_meta(app_version=__version__, params_hash=params_hash),
                mkdirs=not no_mkdirs,
                overwrite=force,
            )
        except FileExistsError as exc:
            _fail(str(exc))
        typer.echo(f"Wrote {resolved['out']}")


@app.command()
def simulate(
    trials: Optional[int] = typer.Option(None, "--trials", help="Number of simulated games"),
    seed: Optional[int] = typer.Option(None, "--seed", help="Base seed"),
    engine: Optional[str] = typer.Option(None, "--engine", help="py_random|numpy_pcg64"),
    out: Optional[str] = typer.Option(None, "--out", help="Output .csv or .json path"),
    config: Optional[str] = typer.Option(None, "--config", help="Path to config file (YAML/JSON)"),
    log_level: Optional[str] = typer.Option(None, "--log-level", help="DEBUG|INFO|WARN|ERROR"),
    log_file: Optional[str] = typer.Option(None, "--log-file", help="Log file path"),
    force: bool = typer.Option(False, "--force", help="Overwrite outputs if they exist"),
    no_mkdirs: bool = typer.Option(False, "--no-mkdirs", help="Do not create parent directories"),
) -> None:
    """Monte Carlo check of the single-card curve against the closed form."""
    resolved, params_hash = _resolve(
        config,
        {
            "trials": trials,
            "seed.value": seed,
            "seed.engine": engine,
            "out": out,
            "log_level": log_level,
            "log_file": log_file,
        },
    )
    seed_cfg = resolved.get("seed", {})
    try:
        result = simulate_curve(
            int(resolved.get("trials", 0)),
            seed=int(seed_cfg.get("value", 0)),
            engine=str(seed_cfg.get("engine", "py_random")),
        )
    except (RuntimeError, ValueError) as exc:
        _fail(str(exc))

    theory = generate_chart_data(1)
    worst = max(
        max(abs(s.line_probability - t.line_probability), abs(s.bingo_probability - t.bingo_probability))
        for s, t in zip(result.points, theory)
    )
    typer.echo(f"Simulated {result.trials} games ({result.engine}, seed {result.seed})")
    typer.echo(f"Max deviation from closed form: {worst:.4f}")

    if resolved.get("out"):
        _write_chart(Path(resolved["out"]), result.points, 1, params_hash, not no_mkdirs, force)


def main(_argv: list[str] | None = None) -> int:
    try:
        app(standalone_mode=True)
        return 0
    except SystemExit as e:
        return int(e.code) if e.code is not None else 0


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
