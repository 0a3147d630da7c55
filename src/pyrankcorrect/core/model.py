"""Container for a fitted multinomial-logit choice model.

Model fitting happens elsewhere (e.g. R's mlogit or statsmodels' MNLogit).
ChoiceModel only carries what the simulator consumes: named coefficients,
their variance-covariance matrix, the alternatives, the reference
alternative and the formula text.

Coefficient names follow the "alternative:variable" convention, with the
two parts in either order, e.g. ``"party:(Intercept)"`` or
``"(Intercept):party"`` and ``"party:age"`` or ``"age:party"``.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Mapping, Sequence

import numpy as np
from numpy.typing import NDArray

from pyrankcorrect import config
from pyrankcorrect.core.exceptions import (
    DimensionError,
    ModelSpecificationError,
    NaNInfError,
)


@dataclass
class ChoiceModel:
    """
    Fitted discrete-choice model consumed by the Monte Carlo simulator.

    Attributes:
        coef_names: K coefficient names ("alternative:variable")
        coefficients: K point estimates
        vcov: Optional K x K variance-covariance matrix
        alternatives: Names of all choice alternatives (the levels of the
            observed choice-frequency table)
        reference: The base alternative whose utility is fixed at 0
        formula: Model formula text, e.g. ``"choice ~ 0 | age"``
        frequencies: Optional observed choice frequency per alternative
        levels: Optional categories of discrete variables in the formula,
            ``{variable: [reference_level, level_2, ...]}``

    Example:
        >>> model = ChoiceModel.from_dict(
        ...     coefficients={
        ...         "party:(Intercept)": 0.4, "party:age": 0.01,
        ...         "race:(Intercept)": 0.1, "race:age": -0.02,
        ...     },
        ...     vcov=np.eye(4) * 0.01,
        ...     reference="gender",
        ...     formula="choice ~ 0 | age",
        ...     alternatives=["party", "race", "gender"],
        ... )
        >>> model.num_coefficients
        4
    """

    coef_names: Sequence[str]
    coefficients: Any
    reference: str
    formula: str
    alternatives: Sequence[str] | None = None
    vcov: Any = None
    frequencies: Mapping[str, float] | None = None
    levels: Mapping[str, Sequence[Any]] = field(default_factory=dict)

    def __post_init__(self) -> None:
        """Normalise arrays and validate shapes."""
        self.coef_names = [str(n) for n in self.coef_names]
        self.coefficients = np.asarray(self.coefficients, dtype=np.float64).reshape(-1)
        K = len(self.coef_names)

        if self.coefficients.shape[0] != K:
            raise DimensionError(
                f"Got {self.coefficients.shape[0]} coefficients for {K} coefficient names."
            )
        if len(set(self.coef_names)) != K:
            raise ModelSpecificationError("Coefficient names must be unique.")
        if not np.all(np.isfinite(self.coefficients)):
            raise NaNInfError("Coefficient estimates contain NaN/Inf values.")

        if self.vcov is not None:
            self.vcov = _as_covariance(self.vcov, K, "vcov")

        if self.alternatives is None:
            if self.frequencies is not None:
                self.alternatives = list(self.frequencies)
            else:
                raise ModelSpecificationError(
                    "Provide the model alternatives (or the choice frequency table)."
                )
        self.alternatives = [str(a) for a in self.alternatives]
        if self.reference not in self.alternatives:
            raise ModelSpecificationError(
                f"Reference alternative '{self.reference}' is not one of the "
                f"alternatives {self.alternatives}."
            )
        self.levels = {k: list(v) for k, v in dict(self.levels).items()}

    # =========================================================================
    # PROPERTIES
    # =========================================================================

    @property
    def num_coefficients(self) -> int:
        """Number of coefficients K."""
        return len(self.coef_names)

    @property
    def num_alternatives(self) -> int:
        """Number of choice alternatives J."""
        return len(self.alternatives)

    @property
    def has_vcov(self) -> bool:
        return self.vcov is not None

    # =========================================================================
    # FORMULA / COEFFICIENT LOOKUP
    # =========================================================================

    def formula_contains(self, variable: str) -> bool:
        """True if ``variable`` appears as a whole term in the formula."""
        pattern = rf"(?<![\w.]){re.escape(variable)}(?![\w.])"
        return re.search(pattern, self.formula) is not None

    def coefficients_for(self, alternative: str) -> dict[str, int]:
        """
        Map the non-alternative part of each coefficient name to its index.

        Example:
            >>> model.coefficients_for("party")
            {'(Intercept)': 0, 'age': 1}
        """
        sep = config.COEF_NAME_SEPARATOR
        found: dict[str, int] = {}
        for idx, name in enumerate(self.coef_names):
            parts = name.split(sep)
            if len(parts) != 2:
                continue
            if parts[0] == alternative:
                found[parts[1]] = idx
            elif parts[1] == alternative:
                found[parts[0]] = idx
        return found

    def intercept_index(self, alternative: str) -> int:
        """Index of the alternative-specific intercept.

        Raises:
            ModelSpecificationError: If the alternative has no intercept
        """
        for term, idx in self.coefficients_for(alternative).items():
            if term.strip().strip("()").lower() == config.INTERCEPT_TOKEN:
                return idx
        raise ModelSpecificationError(
            f"No intercept coefficient found for alternative '{alternative}'."
        )

    def slope_index(self, alternative: str, term: str) -> int | None:
        """Index of the ``alternative:term`` coefficient, or None if absent."""
        return self.coefficients_for(alternative).get(term)

    # =========================================================================
    # CONSTRUCTORS
    # =========================================================================

    @classmethod
    def from_dict(
        cls,
        coefficients: Mapping[str, float],
        reference: str,
        formula: str,
        alternatives: Sequence[str] | None = None,
        vcov: Any = None,
        frequencies: Mapping[str, float] | None = None,
        levels: Mapping[str, Sequence[Any]] | None = None,
    ) -> ChoiceModel:
        """Create a ChoiceModel from a ``{name: estimate}`` mapping.

        The order of ``vcov`` rows/columns must follow the mapping order.
        A pandas DataFrame ``vcov`` is re-indexed by coefficient name.
        """
        names = list(coefficients)
        if vcov is not None and hasattr(vcov, "loc"):
            vcov = vcov.loc[names, names].to_numpy(dtype=np.float64)
        return cls(
            coef_names=names,
            coefficients=[coefficients[n] for n in names],
            reference=reference,
            formula=formula,
            alternatives=alternatives,
            vcov=vcov,
            frequencies=frequencies,
            levels=levels or {},
        )

    def __repr__(self) -> str:
        return (
            f"ChoiceModel(K={self.num_coefficients}, alternatives={self.alternatives}, "
            f"reference='{self.reference}', formula='{self.formula}')"
        )


def _as_covariance(matrix: Any, K: int, name: str) -> NDArray[np.float64]:
    cov = np.asarray(matrix, dtype=np.float64)
    if cov.shape != (K, K):
        raise DimensionError(f"{name} has shape {cov.shape}, expected ({K}, {K}).")
    if not np.all(np.isfinite(cov)):
        raise NaNInfError(f"{name} contains NaN/Inf values.")
    return cov
