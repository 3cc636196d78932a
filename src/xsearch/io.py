"""
I/O utilities for reading Delphes ROOT files with uproot
"""

import uproot
import awkward as ak


# short field name -> Delphes branch
DEFAULT_BRANCHES = {
    "photon_pt": "Photon/Photon.PT",
    "jet_pt": "Jet/Jet.PT",
    "jet_eta": "Jet/Jet.Eta",
    "jet_phi": "Jet/Jet.Phi",
    "jet_mass": "Jet/Jet.Mass",
}


def _find_tree(file, tree_name="Delphes"):
    """
    Detect the correct TTree inside the ROOT file.

    Logic:
    1. If `tree_name` exists, use it.
    2. Otherwise, search for exactly one TTree.
    3. Otherwise, search for a TTree inside subdirectories.
    """
    # Direct match
    if tree_name in file.keys():
        return file[tree_name]

    # Match with ';1' versioning
    if f"{tree_name};1" in file.keys():
        return file[f"{tree_name};1"]

    # If there is exactly one TTree in the root file:
    tt_keys = [k for k, v in file.classnames().items() if v == "TTree"]
    if len(tt_keys) == 1:
        return file[tt_keys[0]]

    # Search inside directories
    for key in file.keys():
        obj = file[key]
        if not hasattr(obj, "keys"):
            continue
        for subkey in obj.keys():
            full = f"{key}/{subkey}"
            if getattr(file[full], "classname", None) == "TTree":
                return file[full]

    raise RuntimeError(f"No TTree found in file {file.file_path}")


def sampled_entries(num_entries, sample_percent=100):
    """
    Number of leading entries to read for a sampling percentage.
    """
    return int(sample_percent * num_entries / 100)


def count_entries(filename, tree_name="Delphes"):
    with uproot.open(filename) as f:
        return _find_tree(f, tree_name).num_entries


def chain_entry_stops(entry_counts, sample_percent=100):
    """
    Spread the first `sample_percent`% of a chain of files over its
    members, in order.

    Parameters
    ----------
    entry_counts : list of int
        Number of entries of each file in the chain.
    sample_percent : float
        Percentage of the whole chain to read.

    Returns
    -------
    list of int
        Entries to read from the start of each file; files past the
        sampled range get 0.
    """
    remaining = sampled_entries(sum(entry_counts), sample_percent)
    stops = []
    for n in entry_counts:
        take = min(n, remaining)
        stops.append(take)
        remaining -= take
    return stops


def load_events(filename, branches=None, tree_name="Delphes", entry_stop=None):
    """
    Load photon and jet branches into an Awkward Array with short
    field names. Reads entries [0, entry_stop) of the tree, all of them
    when entry_stop is None.
    """
    if branches is None:
        branches = DEFAULT_BRANCHES

    with uproot.open(filename) as f:
        tree = _find_tree(f, tree_name)
        columns = {
            name: tree[path].array(entry_stop=entry_stop, library="ak")
            for name, path in branches.items()
        }

    return ak.zip(columns, depth_limit=1)
