"""Type aliases for pyrankcorrect."""

from typing import TypeAlias, Union
import numpy as np

# A ranking as 1-based positions in item order, e.g. (2, 1, 3)
Ranking: TypeAlias = tuple[int, ...]

# Seed or explicit random stream
RandomState: TypeAlias = Union[int, np.random.Generator, None]
