#!/usr/bin/env python3
"""
Load benchmark for the rando search endpoints.

Ramps virtual users through a list of stages; each user repeatedly GETs the
search endpoints, checks for 200 and sleeps between requests. Reports
client-side latency percentiles and the server's X-Query-Duration header.

Usage:
    # Default ramp: 30s to 20 users, 1m down to 10, 15s down to 0
    python scripts/benchmark_randos.py

    # Shorter ramp against one endpoint, saving the raw summary
    python scripts/benchmark_randos.py --stages 5s:4,10s:4,5s:0 \
        --path /v1/randos --output benchmarks/randos.json
"""

import argparse
import json
import re
import sys
import threading
import time
import urllib.error
import urllib.request
from datetime import datetime
from pathlib import Path

DEFAULT_API_URL = "http://localhost:8080"
DEFAULT_PATHS = ["/v0/randos", "/v1/randos"]
DEFAULT_STAGES = "30s:20,1m:10,15s:0"

QUERY_DURATION_HEADER = "X-Query-Duration"
TICK_SECONDS = 0.5

_DURATION = re.compile(r"^(\d+(?:\.\d+)?)(ms|s|m|h)$")
_UNIT_SECONDS = {"ms": 0.001, "s": 1, "m": 60, "h": 3600}


def parse_duration(text: str) -> float:
    """Seconds in a duration such as 30s, 1m or 1.5ms."""
    match = _DURATION.match(text.strip())
    if not match:
        raise ValueError(f"invalid duration: {text!r}")
    return float(match.group(1)) * _UNIT_SECONDS[match.group(2)]


def parse_stages(text: str) -> list:
    """Parse 'duration:target,...' into (seconds, target) pairs."""
    stages = []
    for entry in text.split(","):
        duration, _, target = entry.partition(":")
        if not target:
            raise ValueError(f"stage needs duration:target, got {entry!r}")
        stages.append((parse_duration(duration), int(target)))
    return stages


def target_users(stages: list, elapsed: float) -> int:
    """Linearly interpolated user count at elapsed seconds, None when done."""
    start_target = 0
    for duration, target in stages:
        if elapsed < duration:
            return round(start_target + (target - start_target) * elapsed / duration)
        elapsed -= duration
        start_target = target
    return None


class Recorder:
    """Thread-safe sample store."""

    def __init__(self):
        self.lock = threading.Lock()
        self.samples = {}

    def add(self, path: str, status: int, latency_ms: float, query_ms: float = None):
        with self.lock:
            entry = self.samples.setdefault(
                path, {"ok": 0, "failed": 0, "latency_ms": [], "query_ms": []}
            )
            entry["ok" if status == 200 else "failed"] += 1
            entry["latency_ms"].append(latency_ms)
            if query_ms is not None:
                entry["query_ms"].append(query_ms)


def fetch(api_url: str, path: str, recorder: Recorder, timeout: float) -> None:
    """Issue one GET and record its status and timings."""
    started = time.perf_counter()
    query_ms = None
    try:
        with urllib.request.urlopen(f"{api_url}{path}", timeout=timeout) as response:
            response.read()
            status = response.status
            header = response.headers.get(QUERY_DURATION_HEADER)
            if header:
                try:
                    query_ms = parse_duration(header) * 1000
                except ValueError:
                    pass
    except urllib.error.HTTPError as e:
        status = e.code
    except (urllib.error.URLError, OSError):
        status = 0
    recorder.add(path, status, (time.perf_counter() - started) * 1000, query_ms)


def virtual_user(index: int, active: list, api_url: str, paths: list,
                 recorder: Recorder, pause: float, timeout: float) -> None:
    """Loop until the ramp drops below this user's index."""
    while index < active[0]:
        for path in paths:
            fetch(api_url, path, recorder, timeout)
        time.sleep(pause)


def run_ramp(api_url: str, paths: list, stages: list,
             pause: float = 1.0, timeout: float = 30.0) -> dict:
    """Drive the stages and return the recorded samples."""
    recorder = Recorder()
    # Shared with every user thread; users above active[0] exit.
    active = [0]
    threads = []
    started = time.monotonic()

    while True:
        target = target_users(stages, time.monotonic() - started)
        if target is None:
            break
        active[0] = target
        while len([t for t in threads if t.is_alive()]) < target:
            alive = [t for t in threads if t.is_alive()]
            thread = threading.Thread(
                target=virtual_user,
                args=(len(alive), active, api_url, paths, recorder, pause, timeout),
                daemon=True,
            )
            thread.start()
            threads = alive + [thread]
        time.sleep(TICK_SECONDS)

    active[0] = 0
    for thread in threads:
        thread.join(timeout=timeout + pause)
    return recorder.samples


def percentile(values: list, fraction: float) -> float:
    """Nearest-rank percentile of values."""
    if not values:
        return 0.0
    ordered = sorted(values)
    rank = max(0, min(len(ordered) - 1, int(round(fraction * len(ordered))) - 1))
    return ordered[rank]


def summarize(samples: dict) -> dict:
    summary = {}
    for path, entry in samples.items():
        summary[path] = {
            "requests": entry["ok"] + entry["failed"],
            "status_200": entry["ok"],
            "failed": entry["failed"],
            "latency_ms": {
                "p50": percentile(entry["latency_ms"], 0.50),
                "p95": percentile(entry["latency_ms"], 0.95),
                "p99": percentile(entry["latency_ms"], 0.99),
                "max": max(entry["latency_ms"], default=0.0),
            },
            "query_duration_ms": {
                "p50": percentile(entry["query_ms"], 0.50),
                "p95": percentile(entry["query_ms"], 0.95),
                "max": max(entry["query_ms"], default=0.0),
            },
        }
    return summary


def print_summary(summary: dict) -> None:
    print("\n" + "=" * 60)
    print("RANDO SEARCH BENCHMARK")
    print("=" * 60)
    for path, entry in summary.items():
        latency = entry["latency_ms"]
        query = entry["query_duration_ms"]
        print(f"\n{path}")
        print("-" * 40)
        print(f"  Status 200: {entry['status_200']}/{entry['requests']}")
        print(f"  Latency ms: p50={latency['p50']:.1f} p95={latency['p95']:.1f} "
              f"p99={latency['p99']:.1f} max={latency['max']:.1f}")
        print(f"  {QUERY_DURATION_HEADER} ms: p50={query['p50']:.2f} "
              f"p95={query['p95']:.2f} max={query['max']:.2f}")
    print("\n" + "=" * 60)


def main():
    parser = argparse.ArgumentParser(description="Rando search load benchmark")
    parser.add_argument(
        "--api-url",
        default=DEFAULT_API_URL,
        help=f"API URL (default: {DEFAULT_API_URL})",
    )
    parser.add_argument(
        "--path",
        action="append",
        dest="paths",
        help="Endpoint path incl. query string; repeatable (default: /v0/randos and /v1/randos)",
    )
    parser.add_argument(
        "--stages",
        default=DEFAULT_STAGES,
        help=f"Ramp as duration:target pairs (default: {DEFAULT_STAGES})",
    )
    parser.add_argument(
        "--pause", type=float, default=1.0, help="Seconds each user sleeps between rounds (default: 1)"
    )
    parser.add_argument(
        "--output", "-o", type=Path, help="Optional JSON file for the summary"
    )

    args = parser.parse_args()
    paths = args.paths or DEFAULT_PATHS
    try:
        stages = parse_stages(args.stages)
    except ValueError as e:
        parser.error(str(e))

    total = sum(duration for duration, _ in stages)
    print(f"Ramping {len(stages)} stages over {total:.0f}s against {args.api_url} {paths}...")
    summary = summarize(run_ramp(args.api_url, paths, stages, pause=args.pause))
    print_summary(summary)

    if args.output:
        args.output.parent.mkdir(parents=True, exist_ok=True)
        with open(args.output, "w") as f:
            json.dump({
                "timestamp": datetime.now().isoformat(),
                "api_url": args.api_url,
                "stages": args.stages,
                "results": summary,
            }, f, indent=2)
        print(f"Saved to: {args.output}")

    failed = sum(entry["failed"] for entry in summary.values())
    if failed or not summary:
        sys.exit(1)


if __name__ == "__main__":
    main()
