import argparse
import os
import time

import numpy as np
import pandas as pd

from baselines import POLICIES, make_policy
from experiments.workload_generator import WORKLOADS, generate_workload, load_trace

# --- Configuration ---
ALGORITHMS = ["LRU", "FIFO", "LFU", "ARC", "2Q"]
CACHE_SIZES = [10, 20, 30, 50, 100, 200]
NUM_REQUESTS = 100000
NUM_ITEMS = 10000
OUTPUT_FILE = "results.csv"


def load_requests(trace_file):
    try:
        return load_trace(trace_file)
    except (OSError, ValueError) as e:
        print(f"Error loading data {trace_file}: {e}")
        return None


def run_single_experiment(algorithm, cache_size, requests, trace_name="synthetic"):
    if algorithm not in POLICIES:
        print(f"Unknown algorithm: {algorithm}")
        return None
    cache = make_policy(algorithm, cache_size)

    latencies = np.empty(len(requests))
    process = cache.process_request

    start_time = time.perf_counter()
    for i, req in enumerate(requests):
        t0 = time.perf_counter()
        process(req)
        latencies[i] = (time.perf_counter() - t0) * 1e6  # microseconds
    total_time = time.perf_counter() - start_time

    if len(latencies):
        avg = np.mean(latencies)
        p50, p90, p99 = np.percentile(latencies, [50, 90, 99])
    else:
        avg = p50 = p90 = p99 = 0.0

    return {
        "Algorithm": algorithm,
        "Cache Size": cache_size,
        "Trace": trace_name,
        "Hit Rate (%)": cache.get_hit_rate(),
        "Runtime (s)": total_time,
        "Avg Latency (us)": avg,
        "P50 Latency (us)": p50,
        "P90 Latency (us)": p90,
        "P99 Latency (us)": p99,
    }


def run_comparison(algorithms, sizes, requests, trace_name="synthetic", output=None):
    results = []
    for size in sizes:
        for algo in algorithms:
            print(f"Running {algo} on Size {size}...")
            res = run_single_experiment(algo, size, requests, trace_name)
            if res:
                results.append(res)

    df = pd.DataFrame(results)
    if output:
        df.to_csv(output, index=False)
        print(f"Saved {output}")
    return df


def print_results(df):
    print("\n" + "=" * 60)
    print("FINAL RESULTS")
    print("=" * 60)
    print(f"{'Algorithm':<10} | {'Size':>5} | {'Hit Rate':>9} | {'P99 (us)':>9}")
    print("-" * 44)
    for _, row in df.iterrows():
        print(f"{row['Algorithm']:<10} | {row['Cache Size']:>5} | "
              f"{row['Hit Rate (%)']:>8.2f}% | {row['P99 Latency (us)']:>9.2f}")
    print("=" * 60)


def main(argv=None):
    parser = argparse.ArgumentParser(description="Replay a request trace through each replacement policy")
    parser.add_argument("--algorithms", nargs="+", default=ALGORITHMS)
    parser.add_argument("--sizes", nargs="+", type=int, default=CACHE_SIZES)
    source = parser.add_mutually_exclusive_group()
    source.add_argument("--trace", type=str, help="CSV trace with an item_id column")
    source.add_argument("--workload", choices=WORKLOADS, default="scan")
    parser.add_argument("--requests", type=int, default=NUM_REQUESTS)
    parser.add_argument("--items", type=int, default=NUM_ITEMS)
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--output", type=str, default=OUTPUT_FILE)
    args = parser.parse_args(argv)

    if args.seed is not None:
        np.random.seed(args.seed)

    if args.trace:
        requests = load_requests(args.trace)
        trace_name = os.path.basename(args.trace)
    else:
        requests = generate_workload(args.workload, args.requests, args.items, cache_size=min(args.sizes)).tolist()
        trace_name = args.workload
    if requests is None:
        return 1

    print(f"--- Processing {len(requests)} Requests ---")
    df = run_comparison(args.algorithms, args.sizes, requests, trace_name, args.output)
    if not df.empty:
        print_results(df)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
