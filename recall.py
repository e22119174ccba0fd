from __future__ import annotations

import argparse
import csv
import json
import logging
import math
import sys
from pathlib import Path
from typing import Sequence, TextIO

from tqdm import tqdm

from betarecall import (
    DEFAULT_SETTINGS,
    Model,
    RecallModelError,
    SolverSettings,
    model_to_percentile_decay,
    predict_recall,
    update_recall,
    update_recall_binomial,
)
from betarecall.config_loader import load_solver_settings

BATCH_COLUMNS = ("alpha", "beta", "time", "elapsed")


def _add_model_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--alpha", type=float, default=None, help="Beta alpha (default 4)."
    )
    parser.add_argument(
        "--beta", type=float, default=None, help="Beta beta (default: alpha)."
    )
    parser.add_argument(
        "--time",
        type=float,
        required=True,
        help="Elapsed time the Beta prior describes.",
    )


def _model_from_args(args: argparse.Namespace) -> Model:
    if args.alpha is None and args.beta is None:
        return Model.from_time(args.time)
    if args.beta is None:
        return Model.with_shape(args.time, args.alpha)
    if args.alpha is None:
        raise SystemExit("--beta requires --alpha.")
    return Model.explicit(args.time, args.alpha, args.beta)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Predict and update Beta recall models."
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="JSON file overriding solver settings.",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level.",
    )
    sub = parser.add_subparsers(dest="cmd", required=True)

    predict = sub.add_parser("predict", help="Recall probability after --tnow.")
    _add_model_args(predict)
    predict.add_argument("--tnow", type=float, required=True, help="Elapsed time.")
    predict.add_argument(
        "--exact",
        action="store_true",
        help="Print the probability instead of its log.",
    )

    update = sub.add_parser("update", help="Posterior model after a quiz.")
    _add_model_args(update)
    update.add_argument("--tnow", type=float, required=True, help="Elapsed time.")
    result = update.add_mutually_exclusive_group(required=True)
    result.add_argument("--passed", action="store_true", help="Quiz passed.")
    result.add_argument("--failed", action="store_true", help="Quiz failed.")
    result.add_argument(
        "--successes",
        type=int,
        default=None,
        help="Successful trials (needs --total).",
    )
    update.add_argument("--total", type=int, default=None, help="Total trials.")
    update.add_argument(
        "--tback",
        type=float,
        default=None,
        help="Time the posterior describes (default: the prior's time).",
    )
    update.add_argument(
        "--no-rebalance",
        action="store_true",
        help="Keep the posterior at --tback even when alpha and beta are skewed.",
    )

    halflife = sub.add_parser(
        "halflife", help="Time at which recall hits a percentile."
    )
    _add_model_args(halflife)
    halflife.add_argument(
        "--percentile",
        type=float,
        default=0.5,
        help="Target recall probability (0-1, exclusive).",
    )
    halflife.add_argument(
        "--tolerance", type=float, default=None, help="Search tolerance."
    )
    halflife.add_argument(
        "--coarse",
        action="store_true",
        help="Order-of-magnitude estimate only.",
    )

    batch = sub.add_parser("batch", help="Score a CSV of facts.")
    batch.add_argument(
        "--input",
        type=Path,
        required=True,
        help="CSV with alpha,beta,time,elapsed columns.",
    )
    batch.add_argument(
        "--output",
        type=Path,
        default=None,
        help="Output CSV (default: stdout).",
    )
    batch.add_argument(
        "--chunk-size", type=int, default=4096, help="Rows per batch."
    )
    batch.add_argument("--device", default="cpu", help="Torch device.")
    batch.add_argument(
        "--exact",
        action="store_true",
        help="Write probabilities instead of log-probabilities.",
    )
    batch.add_argument(
        "--no-progress",
        action="store_true",
        help="Disable the progress bar.",
    )
    return parser


def _run_predict(args: argparse.Namespace, settings: SolverSettings) -> dict:
    model = _model_from_args(args)
    value = predict_recall(model, args.tnow, exact=args.exact)
    return {"recall" if args.exact else "log_recall": value}


def _run_update(args: argparse.Namespace, settings: SolverSettings) -> dict:
    model = _model_from_args(args)
    rebalance = not args.no_rebalance
    if args.successes is not None:
        if args.total is None:
            raise SystemExit("--successes requires --total.")
        posterior = update_recall_binomial(
            model,
            args.successes,
            args.total,
            args.tnow,
            rebalance=rebalance,
            tback=args.tback,
            settings=settings,
        )
    else:
        if args.total is not None:
            raise SystemExit("--total only applies with --successes.")
        posterior = update_recall(
            model,
            args.passed,
            args.tnow,
            rebalance=rebalance,
            tback=args.tback,
            settings=settings,
        )
    return posterior.to_dict()


def _run_halflife(args: argparse.Namespace, settings: SolverSettings) -> dict:
    model = _model_from_args(args)
    value = model_to_percentile_decay(
        model,
        args.percentile,
        coarse=args.coarse,
        tolerance=args.tolerance,
        settings=settings,
    )
    return {"percentile": args.percentile, "time": value}


def _read_batch_rows(path: Path) -> list[tuple[float, float, float, float]]:
    rows: list[tuple[float, float, float, float]] = []
    skipped = 0
    with path.open("r", encoding="utf-8", newline="") as fh:
        reader = csv.DictReader(fh)
        missing = set(BATCH_COLUMNS).difference(reader.fieldnames or ())
        if missing:
            raise SystemExit(f"{path} missing columns: {sorted(missing)}")
        for row in reader:
            try:
                values = tuple(float(row[col]) for col in BATCH_COLUMNS)
            except (TypeError, ValueError):
                skipped += 1
                continue
            if not all(map(math.isfinite, values)) or min(values[:3]) <= 0:
                skipped += 1
                continue
            rows.append(values)
    if skipped:
        logging.warning("Skipped %d malformed rows in %s.", skipped, path)
    return rows


def run_batch(
    rows: Sequence[tuple[float, float, float, float]],
    out: TextIO,
    *,
    chunk_size: int,
    device: str,
    exact: bool,
    progress: bool,
) -> int:
    from betarecall.math.recall_batch import as_tensor, predict_recall_batch

    if chunk_size <= 0:
        raise SystemExit("--chunk-size must be > 0.")
    writer = csv.writer(out)
    writer.writerow([*BATCH_COLUMNS, "recall" if exact else "log_recall"])
    bar = tqdm(
        total=len(rows),
        desc="Scoring",
        unit="fact",
        leave=False,
        disable=not progress,
    )
    try:
        for start in range(0, len(rows), chunk_size):
            chunk = rows[start : start + chunk_size]
            params = as_tensor(chunk, device=device)
            scores = predict_recall_batch(
                params[:, 0], params[:, 1], params[:, 2], params[:, 3], exact=exact
            )
            for row, score in zip(chunk, scores.cpu().tolist()):
                writer.writerow([*row, score])
            bar.update(len(chunk))
    finally:
        bar.close()
    return len(rows)


def _run_batch_command(args: argparse.Namespace) -> None:
    rows = _read_batch_rows(args.input)
    kwargs = dict(
        chunk_size=args.chunk_size,
        device=args.device,
        exact=args.exact,
        progress=not args.no_progress,
    )
    if args.output is None:
        run_batch(rows, sys.stdout, **kwargs)
        return
    with args.output.open("w", encoding="utf-8", newline="") as fh:
        run_batch(rows, fh, **kwargs)


def _load_settings(path: Path | None) -> SolverSettings:
    if path is None:
        return DEFAULT_SETTINGS
    try:
        return load_solver_settings(path)
    except RecallModelError:
        raise
    except (OSError, ValueError) as exc:
        raise SystemExit(f"Bad --config: {exc}") from exc


COMMANDS = {
    "predict": _run_predict,
    "update": _run_update,
    "halflife": _run_halflife,
}


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level))
    try:
        settings = _load_settings(args.config)
        if args.cmd == "batch":
            _run_batch_command(args)
            return 0
        result = COMMANDS[args.cmd](args, settings)
    except RecallModelError as exc:
        print(f"{exc.kind.value}: {exc}", file=sys.stderr)
        return 2
    print(json.dumps(result))
    return 0


if __name__ == "__main__":
    sys.exit(main())
