"""Shared optimizer helpers (small utilities)."""

from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Any, List, Optional, Sequence


def scan_alpha_grid(evaluate: Callable[[float], Any], alphas: Sequence[float],
                    workers: Optional[int] = None) -> List[Any]:
    """
    Generic driver for scanning a regularization grid. `evaluate` performs a
    single fit for one alpha and returns its outputs; results come back in grid
    order. Grid points are independent, so with `workers > 1` they are spread
    over a thread pool.
    """
    alphas = [float(a) for a in alphas]
    if workers is None or workers <= 1:
        return [evaluate(alpha) for alpha in alphas]
    with ThreadPoolExecutor(max_workers=workers) as pool:
        return list(pool.map(evaluate, alphas))
