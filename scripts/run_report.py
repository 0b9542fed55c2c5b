"""Helper script to run the variance report with a named policy."""
from __future__ import annotations

import argparse

from pmotrack.cli import main


def _parse_args(argv: list[str] | None = None) -> tuple[argparse.Namespace, list[str]]:
    parser = argparse.ArgumentParser(description="Run the PMO variance report")
    parser.add_argument(
        "--policy",
        choices=["strict", "threshold"],
        default="strict",
        help="strict flags any variance; threshold allows 5%% of the contract amount.",
    )
    return parser.parse_known_args(argv)


if __name__ == "__main__":  # pragma: no cover
    args, remaining = _parse_args()
    forward_args: list[str] = list(remaining)
    if args.policy == "threshold":
        forward_args.append("--threshold-policy")
    raise SystemExit(main(forward_args))
