from dataclasses import dataclass, field
from enum import Enum
import numpy as np
from typing import Optional, Dict, Any, Tuple, Union


class Sequence(str, Enum):
    """Pulse-sequence tags. Members compare equal to their string value."""
    IR = "IR"            # inversion recovery
    CPMG = "CPMG"        # spin-echo train
    PFG = "PFG"          # pulsed-gradient
    IRCPMG = "IRCPMG"    # inversion recovery (indirect) x CPMG (direct)

    def __str__(self):
        return self.value


@dataclass
class RegularizationConfig:
    alpha: Union[float, str] = "gcv"        # fixed value, "lcurve" or "gcv"
    order: int = 0                          # smoothness penalty order (0, 1, 2)
    solution_range: Tuple[float, float, int] = (-5.0, 1.0, 128)   # 1D (log10 min, log10 max, n)
    range_direct: Tuple[float, float, int] = (-5.0, 1.0, 64)
    range_indirect: Tuple[float, float, int] = (-5.0, 1.0, 64)
    alpha_grid: Optional[np.ndarray] = None
    nnls: str = "active-set"
    maxiter: Optional[int] = None
    workers: Optional[int] = None
    gcv_robustness: float = 1.4               # 1 is plain GCV
    snr_threshold: float = 1000.0
    save: bool = False
    save_path: str = "inversion_results.npz"
    verbose: bool = False

    def grid(self) -> np.ndarray:
        if self.alpha_grid is None:
            return np.logspace(-5, 1, 64)
        return np.asarray(self.alpha_grid, dtype=np.float64)


@dataclass(frozen=True)
class SVDBasis:
    U: np.ndarray
    S: np.ndarray
    V: np.ndarray
    n_total: int                 # components before truncation
    indices: np.ndarray          # retained indices; (n, 2) pairs for separable kernels

    @property
    def n_kept(self) -> int:
        return int(self.S.size)


@dataclass(frozen=True)
class ReducedSystem:
    K: np.ndarray                # reduced kernel, diag(S) @ V.T
    g: np.ndarray                # reduced data
    basis: SVDBasis
    snr: Optional[float] = None


@dataclass
class InversionResult:
    sequence: str
    x: Any                       # axis, or (x_direct, x_indirect)
    X: Any                       # solution axis, or (X_direct, X_indirect)
    data: np.ndarray
    f: np.ndarray
    fit: np.ndarray
    residual: np.ndarray
    alpha: float
    snr: Optional[float] = None
    diagnostics: Dict[str, Any] = field(default_factory=dict)

    @property
    def is_2d(self) -> bool:
        return self.f.ndim == 2
