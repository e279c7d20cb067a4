"""Compatibility module for optional compositing dependencies."""

import functools
from typing import Callable, TYPE_CHECKING, TypeVar

F = TypeVar("F", bound=Callable)

if TYPE_CHECKING:
    # Type checkers see these as always available
    import aggdraw  # type: ignore[import-not-found]
    from scipy import interpolate  # type: ignore[import-untyped]
    from skimage import filters  # type: ignore[import-untyped]

# Check for optional dependencies
try:
    import aggdraw  # noqa: F401  # type: ignore[import-not-found,no-redef]

    HAS_AGGDRAW = True
except ImportError:
    HAS_AGGDRAW = False

try:
    from scipy import interpolate  # noqa: F401  # type: ignore[import-untyped,no-redef]

    HAS_SCIPY = True
except ImportError:
    HAS_SCIPY = False

try:
    from skimage import filters  # noqa: F401  # type: ignore[import-untyped,no-redef]

    HAS_SKIMAGE = True
except ImportError:
    HAS_SKIMAGE = False


def _require(available: bool, purpose: str, package: str) -> Callable[[F], F]:
    def decorator(func: F) -> F:
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            if not available:
                raise ImportError(
                    "%s requires: %s\n\n"
                    "Install with:\n"
                    "    pip install 'token-tools[composite]'\n"
                    "Or:\n"
                    "    pip install %s" % (purpose, package, package)
                )
            return func(*args, **kwargs)

        return wrapper  # type: ignore[return-value]

    return decorator


def require_aggdraw(func: F) -> F:
    """
    Decorator to check if aggdraw is available before calling the function.

    Required for anti-aliased outlines (rim patterns, shape layers).

    Raises:
        ImportError: If aggdraw is not installed.
    """
    return _require(HAS_AGGDRAW, "Outline rendering", "aggdraw")(func)


def require_scipy(func: F) -> F:
    """
    Decorator to check if scipy is available before calling the function.

    Required for gradient fills (color interpolation).

    Raises:
        ImportError: If scipy is not installed.
    """
    return _require(HAS_SCIPY, "Gradient fills", "scipy")(func)


def require_skimage(func: F) -> F:
    """
    Decorator to check if scikit-image is available before calling the function.

    Required for blur filters and layer effects (shadow, stroke, glow).

    Raises:
        ImportError: If scikit-image is not installed.
    """
    return _require(HAS_SKIMAGE, "Blur and layer effects", "scikit-image")(func)
