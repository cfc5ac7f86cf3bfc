#!/usr/bin/env python3
"""Benchmark: scan() throughput and StreamingScanner pass latency.

Measures:

  1. Throughput (MB/s) of scan() over a synthetic log, all categories
  2. Throughput with a narrow selection (ipv4-address, email-address)
  3. p99 latency of one StreamingScanner.feed() pass per chunk size

Usage::

    cd /path/to/patgrep
    .venv/bin/python benchmarks/bench_scan.py [--size-mb 4] [--json]

Results are saved to benchmarks/scan_results.json with --json.
"""

from __future__ import annotations

import argparse
import json
import statistics
import sys
import time
from pathlib import Path

from patgrep.scanner.engine import scan
from patgrep.scanner.selection import select
from patgrep.scanner.streaming_scanner import StreamingScanner

# ─── Benchmark Configuration ──────────────────────────────────────────────────

ITERATIONS = 200
CHUNK_SIZES = (4_096, 65_536, 262_144)

LOG_LINE = (
    '10.0.0.5 - alice@example.com [12/Oct/2026:10:00:01 +0000] '
    '"GET /api/v1/items?id=42 HTTP/1.1" 200 512 '
    '"https://example.org/start" sha=d41d8cd98f00b204e9800998ecf8427e '
    "host=fe80::1 mac=00:1a:2b:3c:4d:5e path=/var/log/app.log\n"
)

PROSE_LINE = (
    "The quick brown fox jumps over the lazy dog while the report for Q3 "
    "is summarized in twelve short paragraphs of plain English text.\n"
)


def build_corpus(size_mb: float) -> str:
    target = int(size_mb * 1024 * 1024)
    unit = LOG_LINE + PROSE_LINE
    return unit * (target // len(unit) + 1)


def benchmark_throughput(text: str, label: str, names: list[str] | None = None) -> dict:
    """Time a single full scan() of text and report MB/s."""
    selection = select(names or ())
    t0 = time.perf_counter()
    count = sum(1 for _ in scan(text, selection))
    elapsed = time.perf_counter() - t0
    mb = len(text.encode("utf-8")) / (1024 * 1024)
    result = {
        "label": label,
        "size_mb": round(mb, 2),
        "matches": count,
        "seconds": round(elapsed, 3),
        "mb_per_s": round(mb / elapsed, 2) if elapsed else None,
    }
    print(f"  [{label}] {mb:.2f}MB in {elapsed:.3f}s -> {result['mb_per_s']} MB/s ({count} matches)")
    return result


def benchmark_feed(chunk_size: int) -> dict:
    """Measure p50/p99 latency of feed() for one chunk of log text."""
    chunk = (LOG_LINE * (chunk_size // len(LOG_LINE) + 1))[:chunk_size]
    selection = select()
    latencies: list[float] = []

    for i in range(ITERATIONS):
        scanner = StreamingScanner(selection, scan_id=f"bench-{i:04d}")
        t0 = time.perf_counter()
        scanner.feed(chunk)
        scanner.flush()
        latencies.append((time.perf_counter() - t0) * 1000)

    latencies.sort()
    p50 = latencies[int(ITERATIONS * 0.50)]
    p99 = latencies[min(int(ITERATIONS * 0.99), ITERATIONS - 1)]
    avg = statistics.mean(latencies)
    result = {
        "label": f"feed_{chunk_size}",
        "iterations": ITERATIONS,
        "chunk_size_chars": chunk_size,
        "avg_ms": round(avg, 4),
        "p50_ms": round(p50, 4),
        "p99_ms": round(p99, 4),
    }
    print(f"  [feed {chunk_size:>7} chars] p99={p99:.3f}ms p50={p50:.3f}ms avg={avg:.3f}ms")
    return result


def main() -> int:
    parser = argparse.ArgumentParser(description="patgrep scan benchmark")
    parser.add_argument("--size-mb", type=float, default=4.0, help="Corpus size in MB (default: 4)")
    parser.add_argument("--json", action="store_true", help="Write benchmarks/scan_results.json")
    args = parser.parse_args()

    print("=" * 70)
    print("patgrep scan() Benchmark")
    print(f"Corpus: {args.size_mb}MB | feed() iterations: {ITERATIONS}")
    print("=" * 70)

    corpus = build_corpus(args.size_mb)
    results = [
        benchmark_throughput(corpus, "all_categories"),
        benchmark_throughput(corpus, "ipv4_and_email", ["ipv4-address", "email-address"]),
    ]
    results.extend(benchmark_feed(size) for size in CHUNK_SIZES)
    print("=" * 70)

    if args.json:
        output = {
            "benchmark": "patgrep_scan",
            "timestamp": time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime()),
            "results": results,
        }
        output_path = Path(__file__).parent / "scan_results.json"
        with output_path.open("w") as f:
            json.dump(output, f, indent=2)
        print(f"Results saved to {output_path}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
