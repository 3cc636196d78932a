"""
Output accumulator for the search: the X mass histogram and the
event counters, passed explicitly through the processing functions.
"""

import numpy as np
import hist
from hist import Hist


MASS_LABEL = "Invariant Mass (GeV/c²)"
COUNT_LABEL = "Instances"


class SearchAccumulator:
    """
    Histogram of the X candidate mass plus running counters.

    total_events
        Sampled entries read from the input.
    selected_events
        Entries passing the photon/jet multiplicity selection.
    matches
        Accepted jet groupings; one event can add several.
    """

    def __init__(self, nbins=150, low=0.0, high=3000.0):
        self.hist = Hist(
            hist.axis.Regular(nbins, low, high, name="m_x", label=MASS_LABEL),
            label=COUNT_LABEL,
        )
        self.total_events = 0
        self.selected_events = 0
        self.matches = 0

    def fill(self, m_x, n_events=0, n_selected=0):
        m_x = np.asarray(m_x, dtype=float)
        if m_x.size > 0:
            self.hist.fill(m_x)
        self.matches += int(m_x.size)
        self.total_events += int(n_events)
        self.selected_events += int(n_selected)
        return self

    def __iadd__(self, other):
        if not isinstance(other, SearchAccumulator):
            return NotImplemented
        self.hist += other.hist
        self.total_events += other.total_events
        self.selected_events += other.selected_events
        self.matches += other.matches
        return self

    def __add__(self, other):
        if not isinstance(other, SearchAccumulator):
            return NotImplemented
        merged = self.copy()
        merged += other
        return merged

    def copy(self):
        clone = SearchAccumulator.__new__(SearchAccumulator)
        clone.hist = self.hist.copy()
        clone.total_events = self.total_events
        clone.selected_events = self.selected_events
        clone.matches = self.matches
        return clone

    @property
    def match_fraction(self):
        """Accepted groupings as a percentage of the events read."""
        if self.total_events == 0:
            return 0.0
        return 100.0 * self.matches / self.total_events

    def __repr__(self):
        return (
            f"SearchAccumulator(total_events={self.total_events}, "
            f"selected_events={self.selected_events}, matches={self.matches})"
        )
