"""Shared type aliases for the permutation_mediation package."""

from collections.abc import Sequence

import numpy as np
import pandas as pd

# Array-like inputs accepted by the public API.
ArrayLike = np.ndarray | pd.DataFrame | pd.Series | Sequence[float]

# A single matrix, or one matrix per serial path.
PathInput = ArrayLike | Sequence[ArrayLike] | None
