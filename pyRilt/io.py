"""Input / Output helpers for inversion results."""

from dataclasses import fields, is_dataclass
import numpy as np


def load_npz(npz_path: str) -> dict:
    return dict(np.load(npz_path, allow_pickle=False))


def _flatten(result) -> dict:
    if is_dataclass(result):
        items = {f.name: getattr(result, f.name) for f in fields(result)}
    elif isinstance(result, dict):
        items = dict(result)
    else:
        raise TypeError("result must be dataclass or dict")

    arrays = {}
    for key, value in items.items():
        if value is None:
            continue
        if key == "diagnostics":
            for dkey, dvalue in value.items():
                arrays[f"diag_{dkey}"] = np.asarray(dvalue)
        elif isinstance(value, tuple):
            # 2D axes: (direct, indirect)
            arrays[f"{key}_direct"], arrays[f"{key}_indirect"] = (np.asarray(v) for v in value)
        else:
            arrays[key] = np.asarray(value)
    return arrays


def save_results(path: str, result) -> None:
    """
    Save an InversionResult (or a plain dict) as numpy .npz. Tuple-valued axes
    are split into `<name>_direct` / `<name>_indirect`; diagnostics are stored
    with a `diag_` prefix.
    """
    np.savez(path, **_flatten(result))


def load_results(path: str) -> dict:
    """Load a file written by save_results, regrouping diagnostics and 2D axes."""
    raw = load_npz(path)
    out = {'diagnostics': {}}
    for key, value in raw.items():
        if key.startswith("diag_"):
            out['diagnostics'][key[len("diag_"):]] = value[()] if value.ndim == 0 else value
        elif key.endswith("_direct") and key[:-len("_direct")] + "_indirect" in raw:
            name = key[:-len("_direct")]
            out[name] = (value, raw[name + "_indirect"])
        elif key.endswith("_indirect") and key[:-len("_indirect")] + "_direct" in raw:
            continue
        else:
            out[key] = value[()] if value.ndim == 0 else value
    return out
