import pytest
pytest.importorskip("uproot")
from src.xsearch import io

class DummyTree:
    classname = "TTree"

class DummyFileDelphes:
    # Mimic a Delphes file that has a 'Delphes' TTree

    def __init__(self):
        self._store = {"Delphes": DummyTree(), "ProcessID0": object()}
        self.file_path = "dummy.root"

    def keys(self):
        return list(self._store.keys())

    def __getitem__(self, key):
        return self._store[key]

    def classnames(self):
        return {}

class DummyFileUnique:
    # Mimic a ROOT file with exactly one TTree at the top level

    def __init__(self):
        self._store = {"mytree": DummyTree()}
        self.file_path = "unique.root"

    def keys(self):
        return list(self._store.keys())

    def __getitem__(self, key):
        return self._store[key]

    def classnames(self):
        return {name: obj.classname for name, obj in self._store.items()}

class DummyDir:
    def __init__(self, children):
        self._children = children

    def keys(self):
        return list(self._children.keys())

    def __getitem__(self, key):
        return self._children[key]

class DummyFileNested:
    # Mimic a ROOT file where the TTree lives inside a directory

    def __init__(self):
        tree = DummyTree()
        self.file_path = "nested.root"
        self._store = {
            "dir1": DummyDir({"subtree": tree}),
            "dir1/subtree": tree,
        }

    def keys(self):
        # Only top-level keys, like uproot
        return [k for k in self._store.keys() if "/" not in k]

    def __getitem__(self, key):
        return self._store[key]

    def classnames(self):
        # No top-level TTrees in this scenario
        return {}

class DummyFileEmpty:
    file_path = "empty.root"

    def keys(self):
        return ["histogram"]

    def __getitem__(self, key):
        return object()

    def classnames(self):
        return {"histogram": "TH1F"}

def test_find_tree_prefers_named_tree():
    f = DummyFileDelphes()
    tree = io._find_tree(f, "Delphes")
    assert isinstance(tree, DummyTree)

def test_find_tree_unique_ttree_via_classnames():
    f = DummyFileUnique()
    tree = io._find_tree(f)
    assert isinstance(tree, DummyTree)

def test_find_tree_nested_directory_search():
    f = DummyFileNested()
    tree = io._find_tree(f)
    assert isinstance(tree, DummyTree)

def test_find_tree_raises_when_nothing_found():
    with pytest.raises(RuntimeError, match="No TTree found"):
        io._find_tree(DummyFileEmpty())

@pytest.mark.parametrize(
    "num_entries, percent, expected",
    [(1000, 100, 1000), (1000, 10, 100), (50, 50, 25), (7, 50, 3), (0, 100, 0)],
)
def test_sampled_entries_takes_leading_fraction(num_entries, percent, expected):
    assert io.sampled_entries(num_entries, percent) == expected

@pytest.mark.parametrize(
    "counts, percent, expected",
    [
        ([10, 10], 50, [10, 0]),
        ([10, 10], 75, [10, 5]),
        ([10, 10], 100, [10, 10]),
        ([4, 0, 6], 50, [4, 0, 1]),
        ([3], 50, [1]),
        ([], 100, []),
    ],
)
def test_chain_entry_stops_fill_files_in_order(counts, percent, expected):
    assert io.chain_entry_stops(counts, percent) == expected

class DummyBranch:
    def __init__(self, values):
        self._values = values

    def array(self, entry_stop=None, library="ak"):
        assert library == "ak"
        return io.ak.Array(self._values[:entry_stop])

class DummyDelphesTree(DummyTree):
    # Branches addressed by their full "Collection/Collection.Leaf" path
    num_entries = 3

    def __init__(self):
        self.requested = []
        self._branches = {
            "Photon/Photon.PT": DummyBranch([[25.0], [], [40.0, 12.0]]),
            "Jet/Jet.PT": DummyBranch([[100.0, 80.0], [60.0], []]),
            "Jet/Jet.Eta": DummyBranch([[0.1, -0.4], [1.2], []]),
            "Jet/Jet.Phi": DummyBranch([[0.0, 3.0], [-1.0], []]),
            "Jet/Jet.Mass": DummyBranch([[10.0, 8.0], [5.0], []]),
        }

    def __getitem__(self, path):
        self.requested.append(path)
        return self._branches[path]

class DummyOpenFile(DummyFileDelphes):
    def __init__(self, tree):
        self._store = {"Delphes": tree}
        self.file_path = "delphes.root"

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False

def _patch_open(monkeypatch):
    tree = DummyDelphesTree()
    monkeypatch.setattr(io.uproot, "open", lambda _filename: DummyOpenFile(tree))
    return tree

def test_load_events_renames_delphes_branches(monkeypatch):
    tree = _patch_open(monkeypatch)

    arrays = io.load_events("delphes.root")

    assert sorted(arrays.fields) == sorted(io.DEFAULT_BRANCHES)
    assert sorted(tree.requested) == sorted(io.DEFAULT_BRANCHES.values())
    assert len(arrays) == 3
    assert arrays["jet_pt"].tolist() == [[100.0, 80.0], [60.0], []]
    assert arrays["photon_pt"].tolist() == [[25.0], [], [40.0, 12.0]]

def test_load_events_entry_stop_and_count(monkeypatch):
    _patch_open(monkeypatch)

    arrays = io.load_events("delphes.root", entry_stop=2)

    assert len(arrays) == 2
    assert arrays["jet_mass"].tolist() == [[10.0, 8.0], [5.0]]
    assert io.count_entries("delphes.root") == 3
