#!/usr/bin/env python3
"""Run a meter engine headless over a score script and export every frame."""
from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Iterator, List, Optional, TextIO

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from ragemeter.engine import RageEngine  # noqa: E402

FRAME_STEP_MS = 16.0


def parse_scores(text: str) -> List[float]:
    scores: List[float] = []
    for part in text.split(","):
        part = part.strip()
        if not part:
            continue
        try:
            scores.append(float(part))
        except ValueError as exc:
            raise argparse.ArgumentTypeError(f"invalid score {part!r}") from exc
    if not scores:
        raise argparse.ArgumentTypeError("at least one score is required")
    return scores


def trace_frames(
    scores: List[float],
    frames_per_score: int,
    *,
    variant: str = "indicator",
    seed: Optional[int] = None,
) -> Iterator[dict]:
    """Yield one JSON-ready frame per tick, holding each score for a while.

    Time advances by a fixed 16 ms step so traces are reproducible.
    """

    engine = RageEngine(variant, seed=seed)
    now = 0.0
    frame_index = 0
    for score in scores:
        engine.set_score(score, now)
        for _ in range(frames_per_score):
            frame = engine.tick(now).as_dict()
            frame["frame"] = frame_index
            frame["timeMs"] = now
            yield frame
            frame_index += 1
            now += FRAME_STEP_MS


def write_trace(frames: Iterator[dict], out: TextIO) -> int:
    count = 0
    for frame in frames:
        out.write(json.dumps(frame, sort_keys=True))
        out.write("\n")
        count += 1
    return count


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--scores", type=parse_scores, default=parse_scores("0,80,20"),
                        help="Comma separated raw scores, each held for --frames ticks.")
    parser.add_argument("--frames", type=int, default=60, help="Ticks per score.")
    parser.add_argument("--variant", choices=("indicator", "dial"), default="indicator")
    parser.add_argument("--seed", type=int, default=None, help="Seed for the particle batch.")
    parser.add_argument("--out", type=Path, default=None, help="Output .jsonl file (stdout when omitted).")
    args = parser.parse_args(argv)

    if args.frames < 1:
        parser.error("--frames must be positive")

    frames = trace_frames(args.scores, args.frames, variant=args.variant, seed=args.seed)
    if args.out is None:
        write_trace(frames, sys.stdout)
        return 0
    args.out.parent.mkdir(parents=True, exist_ok=True)
    with args.out.open("w", encoding="utf-8") as fh:
        count = write_trace(frames, fh)
    print(f"wrote {count} frames to {args.out}", file=sys.stderr)
    return 0


if __name__ == "__main__":
    sys.exit(main())
