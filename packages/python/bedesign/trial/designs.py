"""
bedesign Trial Designs

Study design definitions for the bioequivalence comparison:
- Parallel group design (one formulation per subject)
- 2x2 crossover design (each subject receives both formulations)
"""

from __future__ import annotations

from enum import Enum
from typing import Tuple, Union

from ..errors import InvalidParameterError

# Standard ABE acceptance limits on the ratio scale
BE_LIMITS: Tuple[float, float] = (0.80, 1.25)


class Design(str, Enum):
    """Bioequivalence study design types."""
    PARALLEL = "parallel"
    CROSSOVER = "crossover"

    @property
    def variance_multiplier(self) -> float:
        """
        Multiplier of the log-scale variance in the planning SE.

        se = sqrt(multiplier * logvar / n). A crossover compares each subject
        against itself, which halves the multiplier of a parallel comparison.
        """
        return 2.0 if self is Design.CROSSOVER else 4.0


def coerce_design(design: Union[Design, str]) -> Design:
    """
    Convert a design name to a Design.

    Args:
        design: Design member or its name ("parallel", "crossover", any case)

    Returns:
        Design

    Example:
        >>> coerce_design("Crossover")
        <Design.CROSSOVER: 'crossover'>
    """
    if isinstance(design, Design):
        return design
    try:
        return Design(str(design).strip().lower())
    except ValueError:
        valid = ", ".join(d.value for d in Design)
        raise InvalidParameterError(
            f"Unknown design: {design!r}. Supported: {valid}"
        ) from None


def get_design_description(design: Union[Design, str]) -> str:
    """Human-readable description of a design."""
    design = coerce_design(design)
    if design is Design.CROSSOVER:
        return ("2x2 crossover: each subject receives both formulations in "
                "sequential periods (within-subject comparison)")
    return ("Parallel group: each subject receives only one formulation "
            "(between-subject comparison)")
