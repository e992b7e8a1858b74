import argparse
import os

import numpy as np
import pandas as pd

NUM_REQUESTS = 100000
NUM_ITEMS = 10000
ZIPF_ALPHAS = [0.8, 1.0, 1.2]
HOT_ITEMS = 100
SCAN_EVERY = 1000
SCAN_LENGTH = 200
LOOP_CACHE_SIZE = 30
OUTPUT_DIR = "traces"


def generate_zipf(alpha, n, num_items):
    """Item ids in [0, num_items) with p(rank k) ~ 1/k^alpha."""
    if alpha > 1:
        # np.random.zipf is unbounded; fold the tail back into range
        s = np.random.zipf(alpha, n)
        return (s - 1) % num_items

    # np.random.zipf needs alpha > 1, sample the bounded pmf directly
    ranks = np.arange(1, num_items + 1)
    weights = 1 / np.power(ranks, alpha)
    weights /= weights.sum()
    return np.random.choice(ranks, size=n, p=weights) - 1


def generate_uniform(n, num_items):
    return np.random.randint(0, num_items, n)


def generate_scan_mix(n, hot_items=HOT_ITEMS, scan_every=SCAN_EVERY, scan_length=SCAN_LENGTH, alpha=1.2):
    """Zipf traffic over a small hot set, interrupted by one-time scans.

    Every `scan_every` hot requests a run of `scan_length` ids that never
    occur anywhere else in the trace is spliced in. Scan ids start at
    `hot_items` so they never collide with the hot set.
    """
    hot = generate_zipf(alpha, n, hot_items)
    s = []
    next_cold = hot_items
    for i, item in enumerate(hot):
        if len(s) >= n:
            break
        if i and i % scan_every == 0:
            s.extend(range(next_cold, next_cold + scan_length))
            next_cold += scan_length
        s.append(int(item))
    return np.array(s[:n])


def generate_adversarial(n, cache_size=LOOP_CACHE_SIZE):
    # A loop one item larger than the cache: every request misses under LRU
    pattern = np.arange(0, cache_size + 1)
    repeats = n // len(pattern) + 1
    return np.tile(pattern, repeats)[:n]


def generate_workload(name, n=NUM_REQUESTS, num_items=NUM_ITEMS, cache_size=LOOP_CACHE_SIZE, alpha=1.0):
    if name == "zipf":
        return generate_zipf(alpha, n, num_items)
    if name == "uniform":
        return generate_uniform(n, num_items)
    if name == "scan":
        return generate_scan_mix(n)
    if name == "adversarial":
        return generate_adversarial(n, cache_size)
    print(f"Unknown workload: {name}")
    return None


WORKLOADS = ["zipf", "uniform", "scan", "adversarial"]


def save_trace(data, filename):
    df = pd.DataFrame({'item_id': data})
    df.to_csv(filename, index=False)
    print(f"Saved {filename} ({len(data)} requests)")


def load_trace(filename):
    """Read the `item_id` column of a trace CSV as a list of ints."""
    df = pd.read_csv(filename)
    if 'item_id' not in df.columns:
        raise ValueError(f"{filename} has no 'item_id' column")
    return df['item_id'].tolist()


def main(argv=None):
    parser = argparse.ArgumentParser(description="Generate synthetic request traces")
    parser.add_argument("--requests", type=int, default=NUM_REQUESTS)
    parser.add_argument("--items", type=int, default=NUM_ITEMS)
    parser.add_argument("--output-dir", type=str, default=OUTPUT_DIR)
    parser.add_argument("--seed", type=int, default=None)
    args = parser.parse_args(argv)

    if args.seed is not None:
        np.random.seed(args.seed)
    os.makedirs(args.output_dir, exist_ok=True)

    for alpha in ZIPF_ALPHAS:
        print(f"Generating Zipf alpha={alpha}...")
        data = generate_zipf(alpha, args.requests, args.items)
        save_trace(data, os.path.join(args.output_dir, f"zipf_alpha_{alpha}.csv"))

    print("Generating Uniform...")
    save_trace(generate_uniform(args.requests, args.items), os.path.join(args.output_dir, "uniform.csv"))

    print("Generating Scan Mix...")
    save_trace(generate_scan_mix(args.requests), os.path.join(args.output_dir, "scan_mix.csv"))

    print("Generating Adversarial...")
    save_trace(generate_adversarial(args.requests), os.path.join(args.output_dir, "adversarial.csv"))


if __name__ == "__main__":
    main()
