"""
Error handling utilities and boundaries for Deskstat.

Defines the exception taxonomy shared by the theme compiler and the glue
around it, plus a decorator for containing errors at callback boundaries.
"""

import logging
from functools import wraps
from pathlib import Path
from typing import Any, Callable, Optional, TypeVar, Union

logger = logging.getLogger(__name__)

# Type variable for generic function decoration
F = TypeVar("F", bound=Callable[..., Any])


def error_boundary(
    *,
    reraise: bool = False,
    default_return: Any = None,
    log_level: int = logging.ERROR,
) -> Callable[[F], F]:
    """
    Decorator to create consistent error boundaries around functions.

    Used where an exception must not escape into a foreign thread, such as
    watchdog event handlers, stats listeners and window-manager calls.

    Args:
        reraise: If True, re-raise the exception after logging
        default_return: Value to return if error occurs and not reraising
        log_level: Logging level for the error (default: ERROR)

    Returns:
        Decorated function with error handling

    Example:
        >>> @error_boundary(default_return=False)
        ... def apply_hints(title):
        ...     subprocess.run(["wmctrl", "-r", title, "-b", "add,below"], check=True)
        ...     return True
    """

    def decorator(func: F) -> F:
        @wraps(func)
        def wrapper(*args, **kwargs):
            try:
                return func(*args, **kwargs)
            except Exception as e:
                logger.log(
                    log_level,
                    f"Error in {func.__name__}: {e}",
                    exc_info=True,
                    extra={"function": func.__name__, "func_module": func.__module__},
                )

                if reraise:
                    raise

                return default_return

        return wrapper  # type: ignore

    return decorator


class DeskstatError(Exception):
    """Base exception for all Deskstat-specific errors."""

    pass


class ConfigurationError(DeskstatError):
    """Raised when there's an issue with configuration."""

    pass


class PlatformError(DeskstatError):
    """Raised when there's a platform-specific error."""

    pass


class WindowError(DeskstatError):
    """Raised when the window host cannot be started or driven."""

    pass


class CompileError(DeskstatError):
    """Base class for failures that abort a theme compile pass."""

    pass


class ThemeNotFoundError(CompileError):
    """Raised when a theme reference is neither a file nor an installed package."""

    def __init__(self, reference: str, reason: Optional[str] = None):
        self.reference = reference
        message = f"No theme file or matching package found for '{reference}'"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class AssetReadError(CompileError):
    """Raised when a required theme file or asset cannot be read."""

    def __init__(self, path: Union[str, Path], reason: Optional[str] = None):
        self.path = Path(path)
        message = f"Error loading file \"{self.path}\""
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class ModuleResolutionError(CompileError):
    """Raised when a referenced package cannot be located among installed packages."""

    def __init__(self, module: str, requested_by: str, kind: str = "asset"):
        self.module = module
        self.requested_by = requested_by
        super().__init__(
            f"Cannot find module \"{module}\" required by {kind} pre-load of \"{requested_by}\""
        )


class ThemeRenderError(CompileError):
    """Raised when the compiled markup fails template rendering."""

    pass


class WriteError(CompileError):
    """Raised when the compiled document cannot be written."""

    def __init__(self, path: Union[str, Path], reason: Optional[str] = None):
        self.path = Path(path)
        message = f"Cannot write compiled document \"{self.path}\""
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)
