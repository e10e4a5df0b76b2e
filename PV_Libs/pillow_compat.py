"""
Single import point for Pillow (which provides the `PIL` namespace).

The rest of PV_Libs imports `Image` and the decode error types from here so
the dependency is resolved in one place and a missing install fails with an
actionable message instead of a bare ModuleNotFoundError deep in the stack.
"""
from importlib import import_module
from types import ModuleType


def _require(name: str) -> ModuleType:
    try:
        return import_module(name)
    except ImportError as exc:
        raise ImportError("pillow (PIL) is required: install with 'pip install Pillow'") from exc


_pil = _require("PIL")
Image = _require("PIL.Image")

# Type hint helper referencing PIL.Image.Image
ImageClass = Image.Image

UnidentifiedImageError = _pil.UnidentifiedImageError
DecompressionBombError = Image.DecompressionBombError
