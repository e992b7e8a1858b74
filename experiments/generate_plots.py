import argparse
import sys

import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt
import pandas as pd
import seaborn as sns

RESULTS_FILE = "results.csv"
OUTPUT_FILE = "hit_rate_vs_cache_size.png"

sns.set_style("whitegrid")
plt.rcParams['font.size'] = 12


def plot_hit_rate(results, output):
    """One hit-rate-vs-size line per algorithm."""
    plt.figure(figsize=(10, 6))

    for algo in results['Algorithm'].unique():
        data = results[results['Algorithm'] == algo].sort_values('Cache Size')
        plt.plot(data['Cache Size'], data['Hit Rate (%)'], marker='o', label=algo, linewidth=2)

    traces = ", ".join(str(t) for t in results['Trace'].unique()) if 'Trace' in results else ""
    plt.xlabel('Cache Size', fontsize=14)
    plt.ylabel('Hit Rate (%)', fontsize=14)
    plt.title(f'Hit Rate vs Cache Size {traces}'.strip(), fontsize=16, fontweight='bold')
    plt.legend()
    plt.grid(True, alpha=0.3)
    plt.tight_layout()
    plt.savefig(output, dpi=150)
    plt.close()
    print(f"Saved {output}")


def main(argv=None):
    parser = argparse.ArgumentParser(description="Plot hit rate against cache size")
    parser.add_argument("--results", type=str, default=RESULTS_FILE)
    parser.add_argument("--output", type=str, default=OUTPUT_FILE)
    args = parser.parse_args(argv)

    try:
        results = pd.read_csv(args.results)
    except Exception as e:
        print(f"Error loading results: {e}")
        return 1

    plot_hit_rate(results, args.output)
    return 0


if __name__ == "__main__":
    sys.exit(main())
