import os
import tempfile
import unittest

import numpy as np
import pandas as pd

from experiments import generate_plots, run_experiments
from experiments.workload_generator import (
    generate_adversarial, generate_scan_mix, generate_uniform, generate_workload,
    generate_zipf, load_trace, save_trace,
)


class TestWorkloadGenerator(unittest.TestCase):

    def setUp(self):
        np.random.seed(1234)

    def test_zipf_in_range(self):
        for alpha in (0.8, 1.2):
            s = generate_zipf(alpha, 5000, 50)
            self.assertEqual(len(s), 5000)
            self.assertGreaterEqual(s.min(), 0)
            self.assertLess(s.max(), 50)

    def test_zipf_is_skewed(self):
        s = generate_zipf(1.2, 20000, 100)
        counts = np.bincount(s, minlength=100)
        self.assertGreater(counts[0], counts[50])

    def test_uniform_in_range(self):
        s = generate_uniform(1000, 10)
        self.assertTrue(((s >= 0) & (s < 10)).all())

    def test_scan_mix(self):
        s = generate_scan_mix(5000, hot_items=50, scan_every=500, scan_length=100)
        self.assertEqual(len(s), 5000)
        cold = s[s >= 50]
        self.assertGreater(len(cold), 0)
        self.assertEqual(len(np.unique(cold)), len(cold))

    def test_adversarial_is_a_loop(self):
        s = generate_adversarial(100, cache_size=4)
        self.assertEqual(s[:10].tolist(), [0, 1, 2, 3, 4, 0, 1, 2, 3, 4])

    def test_unknown_workload(self):
        self.assertIsNone(generate_workload("sawtooth", 10))

    def test_trace_file(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "trace.csv")
            save_trace(np.array([3, 1, 3]), path)
            self.assertEqual(load_trace(path), [3, 1, 3])

    def test_trace_without_item_id(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "bad.csv")
            pd.DataFrame({"key": [1, 2]}).to_csv(path, index=False)
            with self.assertRaises(ValueError):
                load_trace(path)


class TestRunExperiments(unittest.TestCase):

    def test_single_experiment(self):
        res = run_experiments.run_single_experiment("2Q", 8, [1, 2, 1, 2, 3], "tiny")
        self.assertEqual(res["Algorithm"], "2Q")
        self.assertEqual(res["Trace"], "tiny")
        self.assertAlmostEqual(res["Hit Rate (%)"], 40.0)
        self.assertGreaterEqual(res["P99 Latency (us)"], res["P50 Latency (us)"])

    def test_lru_on_loop_never_hits(self):
        requests = generate_adversarial(1000, cache_size=30).tolist()
        res = run_experiments.run_single_experiment("LRU", 30, requests)
        self.assertEqual(res["Hit Rate (%)"], 0)

    def test_unknown_algorithm(self):
        self.assertIsNone(run_experiments.run_single_experiment("MRU", 8, [1]))

    def test_empty_trace(self):
        res = run_experiments.run_single_experiment("LRU", 8, [])
        self.assertEqual(res["Hit Rate (%)"], 0)
        self.assertEqual(res["Avg Latency (us)"], 0.0)

    def test_missing_trace(self):
        self.assertIsNone(run_experiments.load_requests("/nonexistent/trace.csv"))

    def test_comparison_writes_csv(self):
        with tempfile.TemporaryDirectory() as tmp:
            out = os.path.join(tmp, "results.csv")
            df = run_experiments.run_comparison(["LRU", "2Q"], [4, 8], list(range(50)) * 2, output=out)
            self.assertEqual(len(df), 4)
            self.assertEqual(len(pd.read_csv(out)), 4)

    def test_main_with_workload(self):
        with tempfile.TemporaryDirectory() as tmp:
            out = os.path.join(tmp, "results.csv")
            code = run_experiments.main([
                "--workload", "scan", "--requests", "3000", "--sizes", "10", "20",
                "--seed", "7", "--output", out,
            ])
            self.assertEqual(code, 0)
            df = pd.read_csv(out)
            self.assertEqual(set(df["Algorithm"]), set(run_experiments.ALGORITHMS))
            self.assertEqual(set(df["Trace"]), {"scan"})

    def test_main_with_missing_trace(self):
        self.assertEqual(run_experiments.main(["--trace", "/nonexistent/trace.csv"]), 1)


class TestGeneratePlots(unittest.TestCase):

    def test_plot_from_results(self):
        with tempfile.TemporaryDirectory() as tmp:
            results = os.path.join(tmp, "results.csv")
            png = os.path.join(tmp, "plot.png")
            run_experiments.run_comparison(["LRU", "2Q"], [4, 8], list(range(20)) * 3, "loop", results)
            self.assertEqual(generate_plots.main(["--results", results, "--output", png]), 0)
            self.assertTrue(os.path.getsize(png) > 0)

    def test_missing_results(self):
        self.assertEqual(generate_plots.main(["--results", "/nonexistent/results.csv"]), 1)


if __name__ == "__main__":
    unittest.main()
