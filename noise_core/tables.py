"""Static reference data from NEN-EN-ISO 9612 and EN 458."""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping, Tuple

import numpy as np

from .models import InstrumentType

#: Octave band centre frequencies in Hz.
OCTAVE_BANDS: Tuple[int, ...] = (63, 125, 250, 500, 1000, 2000, 4000, 8000)

#: A-weighting correction per octave band in dB.
A_WEIGHTS: Tuple[float, ...] = (-26.2, -16.1, -8.6, -3.2, 0.0, 1.2, 1.0, -1.1)

#: Table C.5, standard uncertainty u2 of the instrumentation in dB.
INSTRUMENT_UNCERTAINTY: Mapping[InstrumentType, float] = MappingProxyType(
    {
        "slm-class1": 0.7,
        "slm-class2": 1.5,
        "dosimeter": 1.5,
    }
)


@dataclass(frozen=True)
class ReferenceTable:
    """Two-dimensional table with a clamp-then-interpolate contract.

    ``rows`` and ``columns`` are strictly increasing axes; ``values[i][j]``
    belongs to ``(rows[i], columns[j])``. Lookups outside either axis are
    clamped to the edge, so the table is never extrapolated.
    """

    rows: Tuple[float, ...]
    columns: Tuple[float, ...]
    values: Tuple[Tuple[float, ...], ...]

    def lookup(self, row: float, column: float) -> float:
        """Bilinear interpolation at ``(row, column)``."""

        row = min(max(row, self.rows[0]), self.rows[-1])
        column = min(max(column, self.columns[0]), self.columns[-1])
        # Bilinear on a rectangular grid is linear along the columns of every
        # row followed by linear along the rows.
        per_row = np.array([np.interp(column, self.columns, r) for r in self.values])
        return float(np.interp(row, self.rows, per_row))


#: Table C.4, uncertainty contribution c1·u1 in dB for the job-based and
#: full-day strategies, indexed by number of samples N and their standard
#: deviation u1.
TABLE_C4 = ReferenceTable(
    rows=(3, 4, 5, 6, 7, 8, 9, 10, 12, 14, 16, 18, 20, 25, 30),
    columns=(0.5, 1.0, 1.5, 2.0, 2.5, 3.0, 3.5, 4.0, 4.5, 5.0, 5.5, 6.0),
    values=(
        (0.6, 1.6, 3.1, 5.2, 8.0, 11.5, 15.7, 20.6, 26.1, 32.2, 39.0, 46.5),
        (0.4, 0.9, 1.6, 2.5, 3.6, 5.0, 6.7, 8.6, 10.9, 13.4, 16.1, 19.2),
        (0.3, 0.7, 1.2, 1.7, 2.4, 3.3, 4.4, 5.6, 6.9, 8.5, 10.2, 12.1),
        (0.3, 0.6, 0.9, 1.4, 1.9, 2.6, 3.3, 4.2, 5.2, 6.3, 7.6, 8.9),
        (0.2, 0.5, 0.8, 1.2, 1.6, 2.2, 2.8, 3.5, 4.3, 5.1, 6.1, 7.2),
        (0.2, 0.5, 0.7, 1.1, 1.4, 1.9, 2.4, 3.0, 3.6, 4.4, 5.2, 6.1),
        (0.2, 0.4, 0.7, 1.0, 1.3, 1.7, 2.1, 2.6, 3.2, 3.9, 4.6, 5.4),
        (0.2, 0.4, 0.6, 0.9, 1.2, 1.5, 1.9, 2.4, 2.9, 3.5, 4.1, 4.8),
        (0.2, 0.3, 0.5, 0.8, 1.0, 1.3, 1.7, 2.0, 2.5, 2.9, 3.5, 4.0),
        (0.1, 0.3, 0.5, 0.7, 0.9, 1.2, 1.5, 1.8, 2.2, 2.6, 3.0, 3.5),
        (0.1, 0.3, 0.5, 0.6, 0.8, 1.1, 1.3, 1.6, 2.0, 2.3, 2.7, 3.2),
        (0.1, 0.3, 0.4, 0.6, 0.8, 1.0, 1.2, 1.5, 1.8, 2.1, 2.5, 2.9),
        (0.1, 0.3, 0.4, 0.5, 0.7, 0.9, 1.1, 1.4, 1.7, 2.0, 2.3, 2.6),
        (0.1, 0.2, 0.3, 0.5, 0.6, 0.8, 1.0, 1.2, 1.4, 1.7, 2.0, 2.3),
        (0.1, 0.2, 0.3, 0.4, 0.6, 0.7, 0.9, 1.1, 1.3, 1.5, 1.7, 2.0),
    ),
)


def c1u1_lookup(n_samples: float, u1: float) -> float:
    """Return c1·u1 from Table C.4 for ``n_samples`` samples with spread ``u1``."""
    return TABLE_C4.lookup(n_samples, u1)
