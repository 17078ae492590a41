"""Signal-to-noise estimation from the imaginary channel of complex data."""

import numpy as np

from ..exceptions import NoiseEstimateError


def noise_slice(data: np.ndarray) -> np.ndarray:
    """Second half (along axis 0) of the imaginary channel; assumed pure noise."""
    imag = np.imag(data)
    return imag[imag.shape[0] // 2:]


def estimate_snr(data) -> float:
    """
    SNR = max(|Re data|) / std(noise), for complex vector or matrix data.

    The real channel is taken as (mostly) signal, the imaginary channel as
    (mostly) noise. Only the latter half of the imaginary channel along the
    acquisition axis is used, since the first half may still carry signal.
    Matrix rows follow the direct acquisition axis.
    """
    data = np.asarray(data)
    if not np.iscomplexobj(data):
        raise TypeError("SNR estimation needs complex data (real = signal, imaginary = noise)")
    if data.ndim not in (1, 2) or data.size == 0:
        raise ValueError(f"data must be a non-empty vector or matrix, got shape {data.shape}")

    noise = noise_slice(data)
    if noise.size < 2:
        raise NoiseEstimateError(f"need at least 2 noise samples, got {noise.size}")
    sigma_n = float(np.std(noise, ddof=1))
    if not np.isfinite(sigma_n) or sigma_n == 0.0:
        raise NoiseEstimateError(f"degenerate noise standard deviation ({sigma_n})")

    snr = float(np.max(np.abs(np.real(data)))) / sigma_n
    if not np.isfinite(snr):
        raise NoiseEstimateError(f"non-finite SNR ({snr})")
    return snr
