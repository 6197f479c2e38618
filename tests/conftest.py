import matplotlib

matplotlib.use("Agg")

import numpy as np
import pytest

from scprojection.data import make_condition_offset_dataset


@pytest.fixture
def offset_dataset():
    return make_condition_offset_dataset(random_state=0)


@pytest.fixture
def rng():
    return np.random.default_rng(0)


@pytest.fixture
def align_signs():
    """Flip rows of ``a`` (components x cells) to match the signs of ``b``."""

    def _align(a: np.ndarray, b: np.ndarray) -> np.ndarray:
        signs = np.sign(np.sum(a * b, axis=1))
        signs[signs == 0] = 1
        return a * signs[:, None]

    return _align
