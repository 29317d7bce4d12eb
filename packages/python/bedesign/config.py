"""
bedesign Configuration

Run configuration for the design comparison project:
- PowerConfig: Monte-Carlo planning power and sample size search settings
- ProjectConfig: datasets, endpoints, output layout and plotting backend

Configs validate themselves on construction and can be loaded from a JSON
file and overridden from ``BEDESIGN_*`` environment variables.
"""

from __future__ import annotations

import dataclasses
import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Tuple, Union

from .errors import InvalidParameterError
from .viz.backends import available_backends

ENV_PREFIX = "BEDESIGN_"


@dataclass
class PowerConfig:
    """
    Planning power settings.

    Attributes:
        nsim: Monte-Carlo draws for the power at the observed n
        search_nsim: Monte-Carlo draws per n during the sample size search
        alpha: One-sided significance level (0.05 gives a 90% CI)
        target_power: Target power of the sample size search
        n_min: First sample size of the search
        n_max: Last sample size of the search
        step: Search increment (even)
        seed: Random seed; None draws fresh entropy on every run
        default_n_crossover: n used when a crossover dataset has no id column
        default_n_parallel: n used when a parallel dataset has no id column

    Example:
        >>> config = PowerConfig(nsim=20000, seed=1)
    """
    nsim: int = 8000
    search_nsim: int = 8000
    alpha: float = 0.05
    target_power: float = 0.80
    n_min: int = 8
    n_max: int = 220
    step: int = 2
    seed: Optional[int] = 12345
    default_n_crossover: int = 24
    default_n_parallel: int = 48

    def __post_init__(self):
        for name in ("nsim", "search_nsim", "n_min", "n_max", "step",
                     "default_n_crossover", "default_n_parallel"):
            value = getattr(self, name)
            if not isinstance(value, int) or isinstance(value, bool) or value <= 0:
                raise InvalidParameterError(f"{name} must be a positive integer, got {value!r}")
        if not 0 < self.alpha < 1:
            raise InvalidParameterError(f"alpha must be in (0, 1), got {self.alpha!r}")
        if not 0 < self.target_power <= 1:
            raise InvalidParameterError(f"target_power must be in (0, 1], got {self.target_power!r}")
        if self.n_max < self.n_min:
            raise InvalidParameterError("n_max must be >= n_min")
        if self.step % 2:
            raise InvalidParameterError(f"step must be even, got {self.step}")
        if self.seed is not None and (not isinstance(self.seed, int) or isinstance(self.seed, bool)):
            raise InvalidParameterError(f"seed must be an integer or None, got {self.seed!r}")


@dataclass
class ProjectConfig:
    """
    Configuration of one project run.

    Attributes:
        root: Directory under which outputs, docs and figures are written
        outputs_dir: Directory of the text outputs (relative to root)
        docs_dir: Directory of the markdown documents
        figures_dir: Directory of the figures
        outputs_file: Name of the console-style outputs file
        report_file: Name of the markdown report
        questions_file: Name of the markdown questions mapping
        parallel_dataset: Substring identifying the parallel dataset
        crossover_dataset: Substring identifying the crossover dataset
        endpoints: Endpoints analyzed when present
        planning_endpoint: Endpoint whose reference CV drives planning power
        reference_label: Formulation label of the reference product
        test_label: Formulation label of the test product
        backend: Plotting backend ('matplotlib' or 'plotly')
        data_seed: Optional seed overriding the packaged dataset seeds
        power: Planning power settings
    """
    root: Path = field(default_factory=lambda: Path("."))
    outputs_dir: str = "outputs"
    docs_dir: str = "docs"
    figures_dir: str = "figures_project1"
    outputs_file: str = "student_project_1_outputs.txt"
    report_file: str = "student_project_1_report.md"
    questions_file: str = "student_project_1_questions.md"
    parallel_dataset: str = "FSL2015_5"
    crossover_dataset: str = "SLF2014_5"
    endpoints: Tuple[str, ...] = ("AUC", "Cmax")
    planning_endpoint: str = "AUC"
    reference_label: str = "R"
    test_label: str = "T"
    backend: str = "matplotlib"
    data_seed: Optional[int] = None
    power: PowerConfig = field(default_factory=PowerConfig)

    def __post_init__(self):
        self.root = Path(self.root)
        self.endpoints = tuple(self.endpoints)
        if not self.endpoints:
            raise InvalidParameterError("At least one endpoint is required")
        if self.backend not in available_backends():
            raise InvalidParameterError(
                f"Unknown backend: {self.backend}. Available: {', '.join(available_backends())}"
            )
        if self.reference_label == self.test_label:
            raise InvalidParameterError("reference_label and test_label must differ")
        if isinstance(self.power, Mapping):
            self.power = PowerConfig(**self.power)

    # Relative locations, as handed to the output sink

    @property
    def outputs_path(self) -> Path:
        return Path(self.outputs_dir) / self.outputs_file

    @property
    def report_path(self) -> Path:
        return Path(self.docs_dir) / self.report_file

    @property
    def questions_path(self) -> Path:
        return Path(self.docs_dir) / self.questions_file

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ProjectConfig":
        """
        Build a config from a plain mapping (e.g. parsed JSON).

        Unknown keys are rejected.
        """
        known = {f.name for f in dataclasses.fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise InvalidParameterError(f"Unknown config keys: {unknown}")

        values: Dict[str, Any] = dict(data)
        if "power" in values and isinstance(values["power"], Mapping):
            power_known = {f.name for f in dataclasses.fields(PowerConfig)}
            power_unknown = sorted(set(values["power"]) - power_known)
            if power_unknown:
                raise InvalidParameterError(f"Unknown power config keys: {power_unknown}")
            values["power"] = PowerConfig(**values["power"])
        return cls(**values)

    @classmethod
    def from_json(cls, path: Union[str, Path]) -> "ProjectConfig":
        """Load a config from a JSON file."""
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise InvalidParameterError(f"Config file {path} must contain a JSON object")
        return cls.from_dict(data)

    def with_env(self, environ: Optional[Mapping[str, str]] = None) -> "ProjectConfig":
        """
        Copy of this config with ``BEDESIGN_*`` environment overrides applied.

        Recognized variables: BEDESIGN_ROOT, BEDESIGN_NSIM (both Monte-Carlo
        sizes), BEDESIGN_SEED ('none' for fresh entropy), BEDESIGN_BACKEND.
        """
        env = os.environ if environ is None else environ
        config = self
        power = self.power

        if f"{ENV_PREFIX}ROOT" in env:
            config = dataclasses.replace(config, root=Path(env[f"{ENV_PREFIX}ROOT"]))
        if f"{ENV_PREFIX}BACKEND" in env:
            config = dataclasses.replace(config, backend=env[f"{ENV_PREFIX}BACKEND"].strip().lower())
        if f"{ENV_PREFIX}NSIM" in env:
            nsim = _env_int(env, "NSIM")
            power = dataclasses.replace(power, nsim=nsim, search_nsim=nsim)
        if f"{ENV_PREFIX}SEED" in env:
            raw = env[f"{ENV_PREFIX}SEED"].strip()
            seed = None if raw.lower() in ("", "none") else _env_int(env, "SEED")
            power = dataclasses.replace(power, seed=seed)

        if power is not self.power:
            config = dataclasses.replace(config, power=power)
        return config


def _env_int(env: Mapping[str, str], name: str) -> int:
    raw = env[f"{ENV_PREFIX}{name}"]
    try:
        return int(raw)
    except ValueError:
        raise InvalidParameterError(f"{ENV_PREFIX}{name} must be an integer, got {raw!r}") from None
