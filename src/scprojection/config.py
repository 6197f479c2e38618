"""Configuration for manual subspace-projection integration."""

import json
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Hashable, Optional, Union

from scprojection.errors import InvalidInput


@dataclass(frozen=True)
class ProjectionConfig:
    """Parameters for the reference-subspace projection.

    ``n_components`` is the target embedding dimensionality P and
    ``reference_condition`` the condition whose PCA basis every cell is
    projected onto. The solver settings bound the iterative factorization:
    ``tol=0.0`` asks ARPACK for machine precision.
    """

    n_components: int
    reference_condition: Hashable
    random_seed: Optional[int] = 42
    max_iter: int = 1000
    tol: float = 0.0
    degeneracy_ratio: float = 1e-10

    def __post_init__(self):
        if isinstance(self.n_components, bool) or not isinstance(self.n_components, int):
            raise InvalidInput(f"n_components must be an integer, got {self.n_components!r}")
        if self.reference_condition is None:
            raise InvalidInput("reference_condition is required")
        if self.max_iter < 1:
            raise InvalidInput(f"max_iter must be positive, got {self.max_iter}")
        if self.tol < 0:
            raise InvalidInput(f"tol must be non-negative, got {self.tol}")
        if not 0 < self.degeneracy_ratio < 1:
            raise InvalidInput(
                f"degeneracy_ratio must be in (0, 1), got {self.degeneracy_ratio}"
            )

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ProjectionConfig":
        """Build a config from a plain dict.

        Accepts ``p`` as an alias for ``n_components``. Unknown keys are rejected
        so typos do not silently fall back to defaults.
        """
        data = dict(data)
        if "p" in data:
            if "n_components" in data and data["n_components"] != data["p"]:
                raise InvalidInput("Both 'p' and 'n_components' given with different values")
            data["n_components"] = data.pop("p")

        allowed = set(cls.__dataclass_fields__)
        unknown = sorted(set(data) - allowed)
        if unknown:
            raise InvalidInput(f"Unknown config keys: {unknown}. Allowed: {sorted(allowed)}")
        missing = [k for k in ("n_components", "reference_condition") if k not in data]
        if missing:
            raise InvalidInput(f"Missing required config keys: {missing}")

        return cls(**data)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def load_json_config(path: Union[str, Path]) -> dict[str, Any]:
    """Read a projection config file and return its top-level object.

    Errors name the file and, for malformed JSON, the line and column.
    """
    path = Path(path)
    if not path.is_file():
        raise FileNotFoundError(f"Projection config not found: {path}")
    if path.suffix.lower() != ".json":
        raise ValueError(f"Projection config {path} is not a .json file")

    text = path.read_text(encoding="utf-8")
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ValueError(
            f"Projection config {path} is not valid JSON "
            f"(line {exc.lineno}, column {exc.colno}): {exc.msg}"
        ) from exc

    if not isinstance(data, dict):
        raise ValueError(
            f"Projection config {path} must hold a JSON object of settings, "
            f"found {type(data).__name__}"
        )
    return data


def load_projection_config(path: Union[str, Path]) -> ProjectionConfig:
    """Load a ``ProjectionConfig`` from a JSON file."""
    return ProjectionConfig.from_dict(load_json_config(path))
