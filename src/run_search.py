"""
Main entry point for the photon + di-Z jet search.

Reads Delphes simulation output, keeps events with exactly one photon
and at least two jets, splits the jets of each event into every pair
of complementary groups, and fills the invariant mass of the combined
system whenever both groups are compatible with a Z boson.
"""

import argparse
import copy
import glob
import time

import yaml
import awkward as ak

from src.xsearch.io import load_events, count_entries, chain_entry_stops
from src.xsearch.selection import single_photon_dijet_selection
from src.xsearch.physics import jet_four_vectors
from src.xsearch.grouping import evaluate_events
from src.xsearch.accumulator import SearchAccumulator
from src.xsearch.plotting import plot_mass_histogram, save_histogram_arrays


DEFAULT_CONFIG = {
    "tree_name": "Delphes",
    # first N% of the entries, not a random sample
    "sample_percent": 100.0,
    "selection": {
        "n_photons": 1,
        "min_jets": 2,
    },
    "boson": {
        "mass": 91.1876,
        "margin": 10.0,
        "stop_at_first_match": False,
    },
    "hist": {
        "nbins": 150,
        "min": 0.0,
        "max": 3000.0,
    },
    "output_dir": "output",
    "analysis": {
        "make_plots": True,
        "show_plot": False,
    },
}


# Argument parsing and config loading
def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        description="Search for X -> ZZ candidates in jet groupings of Delphes events."
    )
    parser.add_argument(
        "input_file",
        help="Delphes ROOT file (glob patterns are expanded).",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Optional YAML configuration file overriding the defaults.",
    )
    return parser.parse_args(argv)


def _merge(base, override):
    merged = copy.deepcopy(base)
    for key, value in (override or {}).items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def validate_config(config):
    margin = config["boson"]["margin"]
    if margin <= 0:
        raise ValueError(f"boson.margin must be positive, got {margin}")

    sample_percent = config["sample_percent"]
    if not 0 < sample_percent <= 100:
        raise ValueError(
            f"sample_percent must be in (0, 100], got {sample_percent}"
        )

    hist_cfg = config["hist"]
    if hist_cfg["nbins"] < 1:
        raise ValueError(f"hist.nbins must be >= 1, got {hist_cfg['nbins']}")
    if hist_cfg["max"] <= hist_cfg["min"]:
        raise ValueError("hist.max must be larger than hist.min")

    if config["selection"]["min_jets"] < 2:
        raise ValueError("selection.min_jets must be at least 2 to form two groups")

    return config


def load_config(path=None):
    if path is None:
        return validate_config(copy.deepcopy(DEFAULT_CONFIG))
    with open(path) as f:
        user_config = yaml.safe_load(f)
    return validate_config(_merge(DEFAULT_CONFIG, user_config))


def progress_interval(total):
    """
    Number of events between progress lines (about 1% of the total).
    Never zero, even for fewer than 100 events.
    """
    return max(1, total // 100)


def make_accumulator(config):
    hist_cfg = config["hist"]
    return SearchAccumulator(
        nbins=hist_cfg["nbins"], low=hist_cfg["min"], high=hist_cfg["max"]
    )


# Chain loading and analysis
def load_chain(files, config):
    """
    Read the first sample_percent% of the entries of all files taken
    together, in file order, as one Awkward Array.
    """
    tree_name = config["tree_name"]
    counts = [count_entries(fname, tree_name) for fname in files]
    stops = chain_entry_stops(counts, config["sample_percent"])

    parts = [
        load_events(fname, tree_name=tree_name, entry_stop=stop)
        for fname, stop in zip(files, stops)
        if stop > 0
    ]
    if not parts:
        return ak.Array([])
    if len(parts) == 1:
        return parts[0]
    return ak.concatenate(parts)


def process_chain(files, config, accumulator=None):
    """
    Jet grouping search over a chain of input files.

    Steps:
      1. Load photon and jet branches (first sample_percent% of the chain).
      2. In slices of ~1% of the entries, print progress and:
         a. Require exactly one photon and at least two jets.
         b. Build jet four-vectors.
         c. Test every jet bipartition against the Z mass window.
         d. Fill the X mass of each accepted grouping.
    """
    if accumulator is None:
        accumulator = make_accumulator(config)

    # 1) Load events
    arrays = load_chain(files, config)

    total = len(arrays)
    print(f"  * Chain contains {total} events")
    print(f"  * Margin for Z Mass: {config['boson']['margin']}")

    selection_cfg = config["selection"]
    boson_cfg = config["boson"]
    step = progress_interval(total)

    for start in range(0, total, step):
        print(f"Progress: {100.0 * start / total:g}%")
        chunk = arrays[start:start + step]

        # 2a) Photon and jet multiplicity
        selected = single_photon_dijet_selection(
            chunk,
            n_photons=selection_cfg["n_photons"],
            min_jets=selection_cfg["min_jets"],
        )

        # 2b-c) Jet groupings
        m_x = []
        if len(selected) > 0:
            jets = jet_four_vectors(selected)
            m_x, _ = evaluate_events(
                jets,
                reference_mass=boson_cfg["mass"],
                margin=boson_cfg["margin"],
                first_match_only=boson_cfg["stop_at_first_match"],
            )

        # 2d) Fill
        accumulator.fill(m_x, n_events=len(chunk), n_selected=len(selected))

    return accumulator


def process_file(filename, config, accumulator=None):
    return process_chain([filename], config, accumulator)


def write_outputs(accumulator, config):
    outdir = config["output_dir"]
    save_histogram_arrays(accumulator.hist, outdir)

    analysis_cfg = config["analysis"]
    if analysis_cfg.get("make_plots", True):
        path = plot_mass_histogram(
            accumulator.hist, outdir, show=analysis_cfg.get("show_plot", False)
        )
        print(f"[INFO] Saved histogram plot to {path}")


def print_summary(accumulator):
    print("Progress: 100%")
    print(f"Number of events that match criteria: {accumulator.matches}")
    print(f"Percentage of such events:            {accumulator.match_fraction:g}%")
    print(f"Events passing photon/jet selection:  {accumulator.selected_events}")


def main(argv=None):
    args = parse_args(argv)
    config = load_config(args.config)

    files = sorted(glob.glob(args.input_file))
    if not files:
        raise RuntimeError(f"No input files found for pattern {args.input_file}")

    if len(files) > 1:
        print(f"[INFO] Found {len(files)} input files.")

    start_time = time.perf_counter()

    accumulator = process_chain(files, config)

    wall_time = time.perf_counter() - start_time

    print_summary(accumulator)
    if accumulator.total_events == 0:
        print("[WARN] No events were read from the input.")

    write_outputs(accumulator, config)

    print(f"Total wall time: {wall_time:.2f} s")
    print(f"Saved outputs to {config['output_dir']}")
    print("  * Exiting...")
    return accumulator


if __name__ == "__main__":
    main()
