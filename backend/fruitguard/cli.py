"""Command line entry point: analyze images against a relay or serve the API."""

from __future__ import annotations

import argparse
import json
import os
import sys
from typing import List, Optional

import httpx

from fruitguard.client import RelayClient
from fruitguard.presentation import build_result_view, summarize_view
from fruitguard.utils.logging import configure_logging

DEFAULT_RELAY_URL = "http://localhost:8000"


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="fruitguard", description="Fruit disease detection relay")
    parser.add_argument("--log-level", default=None, help="Logging level (default: LOG_LEVEL or INFO)")
    subparsers = parser.add_subparsers(dest="command", required=True)

    analyze = subparsers.add_parser("analyze", help="Analyze an image file or a sample")
    target = analyze.add_mutually_exclusive_group(required=True)
    target.add_argument("image", nargs="?", help="Path to an image file")
    target.add_argument("--sample", help="Label of a catalogue sample, e.g. Apple")
    analyze.add_argument("--relay-url", default=os.getenv("FRUITGUARD_RELAY_URL", DEFAULT_RELAY_URL))
    analyze.add_argument("--token", default=os.getenv("RELAY_AUTH_TOKEN"), help="Bearer token for the relay")
    analyze.add_argument("--json", action="store_true", help="Print the raw result as JSON")

    samples = subparsers.add_parser("samples", help="List the sample images offered by a relay")
    samples.add_argument("--relay-url", default=os.getenv("FRUITGUARD_RELAY_URL", DEFAULT_RELAY_URL))
    samples.add_argument("--token", default=os.getenv("RELAY_AUTH_TOKEN"))

    serve = subparsers.add_parser("serve", help="Run the relay API with uvicorn")
    serve.add_argument("--host", default="0.0.0.0")
    serve.add_argument("--port", type=int, default=8000)
    serve.add_argument("--reload", action="store_true")
    return parser


def _run_analyze(args: argparse.Namespace) -> int:
    with RelayClient(args.relay_url, token=args.token) as client:
        try:
            if args.sample:
                outcome = client.analyze_sample(args.sample)
            else:
                outcome = client.analyze_file(args.image)
        except (FileNotFoundError, LookupError) as exc:
            print(str(exc), file=sys.stderr)
            return 2
        except httpx.HTTPError as exc:
            print(f"Relay request failed: {exc}", file=sys.stderr)
            return 1

    stream = sys.stdout if outcome.notification.level == "success" else sys.stderr
    print(outcome.notification.message, file=stream)
    if outcome.result is None:
        return 1

    if args.json:
        print(json.dumps(outcome.result, indent=2, ensure_ascii=False))
    else:
        print(summarize_view(build_result_view(outcome.result)))
    return 0 if outcome.status == "success" else 1


def _run_samples(args: argparse.Namespace) -> int:
    with RelayClient(args.relay_url, token=args.token) as client:
        try:
            samples = client.list_samples()
        except httpx.HTTPError as exc:
            print(f"Relay request failed: {exc}", file=sys.stderr)
            return 1
    for sample in samples:
        print(f"{sample.get('emoji', '')} {sample.get('label')}: {sample.get('url')}".strip())
    return 0


def _run_serve(args: argparse.Namespace) -> int:
    import uvicorn

    uvicorn.run("fruitguard.main:app", host=args.host, port=args.port, reload=args.reload)
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = _build_parser().parse_args(argv)
    configure_logging(args.log_level)

    if args.command == "analyze":
        return _run_analyze(args)
    if args.command == "samples":
        return _run_samples(args)
    return _run_serve(args)


if __name__ == "__main__":
    sys.exit(main())
