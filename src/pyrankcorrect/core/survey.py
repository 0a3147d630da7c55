"""Survey container for ranking questions with a paired anchor question.

Tech-Friendly Names (Primary):
    - RankingSurvey: Respondent rankings, anchor correctness and weights
"""

from __future__ import annotations

import re
import warnings
from collections import Counter
from dataclasses import dataclass, field
from typing import Any, Literal, Sequence

import numpy as np
from numpy.typing import NDArray

from pyrankcorrect.core.exceptions import (
    DataQualityWarning,
    DataValidationError,
    DimensionError,
    InsufficientDataError,
    NaNInfError,
    ValueRangeError,
)
from pyrankcorrect.core.permutations import decode_ranking, encode_ranking


@dataclass
class RankingSurvey:
    """
    Respondent-level answers to a full ranking question.

    Each respondent ranks J items and answers an anchor question whose
    correct ranking is known. Rankings are stored as an N x J array of
    1-based positions in item order; the digit-string form ("213") is
    accepted on input and produced by ``keys``.

    Attributes:
        rankings: N ranking keys (e.g. "213") or position sequences
        anchor_correct: N booleans / 0-1 values, True if the respondent
            answered the anchor question correctly
        weights: Optional N survey weights (defaults to 1 per respondent)
        num_items: Number of items J. Inferred from the valid rankings if None.
        nan_policy: What to do with malformed rankings, missing anchors or
            non-finite weights: 'raise' (default), 'warn' (drop with a
            DataQualityWarning) or 'drop' (drop silently)

    Example:
        >>> survey = RankingSurvey(
        ...     rankings=["123", "213", "123", "321"],
        ...     anchor_correct=[1, 1, 0, 1],
        ... )
        >>> survey.num_respondents
        4
        >>> survey.anchor_accuracy
        0.75
    """

    rankings: Any
    anchor_correct: Any
    weights: Any = None
    num_items: int | None = None
    nan_policy: Literal["raise", "warn", "drop"] = field(default="raise", repr=False)

    positions: NDArray[np.int64] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        """Decode rankings and validate inputs."""
        raw_rankings = list(self.rankings)
        n = len(raw_rankings)
        if n == 0:
            raise InsufficientDataError("RankingSurvey needs at least one respondent.")

        anchor = np.asarray(self.anchor_correct, dtype=np.float64).reshape(-1)
        if anchor.shape[0] != n:
            raise DimensionError(
                f"anchor_correct has {anchor.shape[0]} entries but there are "
                f"{n} rankings. Provide one anchor indicator per respondent."
            )

        if self.weights is None:
            weights = np.ones(n, dtype=np.float64)
        else:
            weights = np.asarray(self.weights, dtype=np.float64).reshape(-1)
            if weights.shape[0] != n:
                raise DimensionError(
                    f"weights has {weights.shape[0]} entries but there are {n} rankings."
                )

        if self.num_items is None:
            self.num_items = _infer_num_items(raw_rankings)

        decoded: list[tuple[int, ...] | None] = []
        for r in raw_rankings:
            try:
                decoded.append(decode_ranking(_as_key(r), self.num_items))
            except (DataValidationError, TypeError, ValueError):
                decoded.append(None)

        bad_ranking = np.array([d is None for d in decoded])
        bad_anchor = ~np.isfinite(anchor) | ~np.isin(anchor, (0.0, 1.0))
        bad_weight = ~np.isfinite(weights)
        bad = bad_ranking | bad_anchor | bad_weight

        if np.any(bad):
            keep = self._handle_invalid(bad, bad_ranking, bad_anchor, bad_weight)
            decoded = [d for d, k in zip(decoded, keep) if k]
            anchor = anchor[keep]
            weights = weights[keep]

        if len(decoded) == 0:
            raise InsufficientDataError("No valid respondents remain after dropping.")

        self.positions = np.array(decoded, dtype=np.int64).reshape(len(decoded), self.num_items)
        self.anchor_correct = anchor.astype(bool)
        self.weights = weights
        self.rankings = [encode_ranking(row) for row in self.positions]

        self._validate()

    def _handle_invalid(
        self,
        bad: NDArray[np.bool_],
        bad_ranking: NDArray[np.bool_],
        bad_anchor: NDArray[np.bool_],
        bad_weight: NDArray[np.bool_],
    ) -> NDArray[np.bool_]:
        """Apply nan_policy to invalid respondents and return the keep mask."""
        rows = np.where(bad)[0]
        row_preview = rows[:5].tolist()
        row_msg = str(row_preview) + ("..." if len(rows) > 5 else "")

        problems = []
        if np.any(bad_ranking):
            problems.append(f"{int(bad_ranking.sum())} malformed rankings")
        if np.any(bad_anchor):
            problems.append(f"{int(bad_anchor.sum())} missing/non-binary anchors")
        if np.any(bad_weight):
            problems.append(f"{int(bad_weight.sum())} NaN/Inf weights")
        detail = ", ".join(problems)

        if self.nan_policy == "raise":
            error_cls = NaNInfError if not np.any(bad_ranking) else ValueRangeError
            raise error_cls(
                f"Found {detail} in {len(rows)} respondents (rows: {row_msg}). "
                f"Rankings must be permutations of 1..{self.num_items}. "
                f"Use nan_policy='drop' to remove affected rows, or "
                f"nan_policy='warn' to drop with a warning."
            )
        elif self.nan_policy == "warn":
            warnings.warn(
                f"Dropping {len(rows)} respondents with {detail} (rows: {row_msg}).",
                DataQualityWarning,
                stacklevel=4,
            )
        elif self.nan_policy != "drop":
            raise ValueError(
                f"Unknown nan_policy: {self.nan_policy}. Use 'raise', 'warn' or 'drop'."
            )
        return ~bad

    def _validate(self) -> None:
        """Validate weight signs and totals."""
        if np.any(self.weights < 0):
            neg = np.where(self.weights < 0)[0][:5].tolist()
            raise ValueRangeError(
                f"Found {int(np.sum(self.weights < 0))} negative survey weights "
                f"at rows {neg}. Weights must be non-negative."
            )
        if not np.sum(self.weights) > 0:
            raise ValueRangeError("Survey weights must have a positive total.")

    # =========================================================================
    # PROPERTIES
    # =========================================================================

    @property
    def num_respondents(self) -> int:
        """Number of respondents N (after any dropping)."""
        return self.positions.shape[0]

    @property
    def keys(self) -> list[str]:
        """Ranking keys, one per respondent."""
        return list(self.rankings)

    @property
    def total_weight(self) -> float:
        """Sum of survey weights."""
        return float(np.sum(self.weights))

    @property
    def anchor_accuracy(self) -> float:
        """Share of respondents answering the anchor question correctly.

        Unweighted, matching how the random-response share is identified.
        """
        return float(np.mean(self.anchor_correct))

    # =========================================================================
    # CONSTRUCTORS
    # =========================================================================

    @classmethod
    def from_dataframe(
        cls,
        df: Any,  # pandas.DataFrame
        main_q: str,
        anc_correct: str,
        weight: str | None = None,
        num_items: int | None = None,
        nan_policy: Literal["raise", "warn", "drop"] = "raise",
    ) -> RankingSurvey:
        """
        Create RankingSurvey from a pandas DataFrame.

        The ranking is read from column ``main_q`` when it exists (digit
        strings such as "213"). Otherwise the wide layout is used: columns
        ``<main_q>_1 .. <main_q>_J`` hold the position of each item and are
        united into one key per row.

        Args:
            df: DataFrame with one row per respondent
            main_q: Ranking column name, or prefix of the per-item columns
            anc_correct: Column with the anchor-correctness indicator
            weight: Optional survey weight column
            num_items: Number of items J (inferred if None)
            nan_policy: See RankingSurvey

        Returns:
            RankingSurvey instance

        Example:
            >>> import pandas as pd
            >>> df = pd.DataFrame({
            ...     "app_identity_1": [1, 2, 1],
            ...     "app_identity_2": [2, 1, 3],
            ...     "app_identity_3": [3, 3, 2],
            ...     "anc_correct": [1, 0, 1],
            ... })
            >>> survey = RankingSurvey.from_dataframe(df, "app_identity", "anc_correct")
            >>> survey.keys
            ['123', '213', '132']
        """
        if anc_correct not in df.columns:
            raise DataValidationError(f"Anchor column '{anc_correct}' not found in data.")
        if weight is not None and weight not in df.columns:
            raise DataValidationError(f"Weight column '{weight}' not found in data.")

        if main_q in df.columns:
            rankings = [_as_key(v) for v in df[main_q]]
        else:
            rankings = _unite_position_columns(df, main_q)

        weights = df[weight].to_numpy(dtype=np.float64) if weight is not None else None
        return cls(
            rankings=rankings,
            anchor_correct=df[anc_correct].to_numpy(dtype=np.float64),
            weights=weights,
            num_items=num_items,
            nan_policy=nan_policy,
        )

    def to_dataframe(self) -> Any:
        """Return respondent rows as a pandas DataFrame (ranking, anchor, weight)."""
        import pandas as pd

        return pd.DataFrame(
            {
                "ranking": self.keys,
                "anchor_correct": self.anchor_correct,
                "weight": self.weights,
            }
        )

    def __repr__(self) -> str:
        return (
            f"RankingSurvey(N={self.num_respondents}, J={self.num_items}, "
            f"anchor_accuracy={self.anchor_accuracy:.3f})"
        )


def _as_key(value: Any) -> str | Sequence[int]:
    """Normalise one ranking cell to a key string or position sequence."""
    if isinstance(value, str):
        return value.strip()
    if isinstance(value, (int, np.integer)):
        return str(int(value))
    if isinstance(value, (float, np.floating)):
        if not np.isfinite(value) or value != int(value):
            raise ValueRangeError(f"Ranking value {value} is not an integer key.")
        return str(int(value))
    return [int(p) for p in value]


def _infer_num_items(raw_rankings: Sequence[Any]) -> int:
    """Most common length among rankings that decode to a permutation.

    Malformed rows (missing cells, repeated digits) do not vote, so they
    cannot set J for the valid rows. Ties go to the earliest length seen.
    """
    lengths: Counter[int] = Counter()
    for r in raw_rankings:
        try:
            lengths[len(decode_ranking(_as_key(r)))] += 1
        except (DataValidationError, TypeError, ValueError):
            continue
    if not lengths:
        raise ValueRangeError(
            "Cannot infer the number of items: no ranking is a permutation "
            "of 1..J. Pass num_items."
        )
    return lengths.most_common(1)[0][0]


def _unite_position_columns(df: Any, main_q: str) -> list[str]:
    """Concatenate ``<main_q>_<k>`` position columns into ranking keys."""
    pattern = re.compile(rf"^{re.escape(main_q)}_(\d+)$")
    matched = []
    for col in df.columns:
        m = pattern.match(str(col))
        if m:
            matched.append((int(m.group(1)), col))
    if not matched:
        raise DataValidationError(
            f"Ranking column '{main_q}' not found, and no '{main_q}_<k>' "
            "position columns are present."
        )
    cols = [col for _, col in sorted(matched)]
    values = df[cols].to_numpy()

    keys = []
    for row in values:
        try:
            keys.append("".join(str(int(v)) for v in row))
        except (TypeError, ValueError):
            # missing cells; left for nan_policy to handle
            keys.append("")
    return keys
