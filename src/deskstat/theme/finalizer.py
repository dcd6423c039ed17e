"""
Final phase: render template variables and write the compiled document.
"""

import html
import logging
import os
import re
import tempfile
import threading
from pathlib import Path
from typing import Any, Dict, Optional

from jinja2 import Environment, BaseLoader, TemplateError

from ..utils.errors import ThemeRenderError, WriteError

logger = logging.getLogger(__name__)

# Directory exposed to themes as paths.root
PACKAGE_ROOT = Path(__file__).resolve().parent.parent

TITLE_PATTERN = re.compile(r"<title(?:\s[^>]*)?>.*?</title>", re.IGNORECASE | re.DOTALL)
HEAD_PATTERN = re.compile(r"<head(?:\s[^>]*)?>", re.IGNORECASE)
DOCTYPE_PATTERN = re.compile(r"^\s*<!DOCTYPE[^>]*>", re.IGNORECASE)


def create_template_environment() -> Environment:
    """
    Build a Jinja2 environment using EJS-style delimiters.

    ``<%= expr %>`` prints, ``<% stmt %>`` is a statement and ``<%# ... %>``
    a comment. Only the delimiters are EJS: expressions and statements use
    Jinja syntax, so conditionals are written
    ``<% if debugMode %>...<% endif %>`` and an EJS block such as
    ``<% if (debugMode) { %>`` fails to render. Curly braces in inlined CSS
    and JS are left alone.
    """
    return Environment(
        loader=BaseLoader(),
        block_start_string="<%",
        block_end_string="%>",
        variable_start_string="<%=",
        variable_end_string="%>",
        comment_start_string="<%#",
        comment_end_string="%>",
        autoescape=False,
        keep_trailing_newline=True,
    )


def pin_title(markup: str, title: str) -> str:
    """
    Force the document title to ``title``.

    Replaces the first ``<title>`` element, or inserts one at the start of
    ``<head>`` (after the doctype when there is no head).
    """
    tag = f"<title>{html.escape(title)}</title>"

    if TITLE_PATTERN.search(markup):
        return TITLE_PATTERN.sub(lambda m: tag, markup, count=1)

    anchor = HEAD_PATTERN.search(markup) or DOCTYPE_PATTERN.search(markup)
    if anchor:
        return markup[: anchor.end()] + tag + markup[anchor.end() :]
    return tag + markup


class DocumentFinalizer:
    """
    Renders spliced markup and writes it to the compiled document path.

    The path is allocated on first write and reused for every later write
    so the window can keep pointing at the same file across reloads.
    """

    def __init__(
        self,
        debug: bool = False,
        output_path: Optional[Path] = None,
        root_dir: Path = PACKAGE_ROOT,
        title: Optional[str] = None,
    ):
        """
        Initialize the finalizer.

        Args:
            debug: Value of the ``debugMode`` template variable
            output_path: Fixed output file; a temporary file is used when None
            root_dir: Directory exposed as ``paths.root``
            title: Window title forced onto the document, kept as written when None
        """
        self.debug = debug
        self.root_dir = Path(root_dir)
        self.title = title
        self.environment = create_template_environment()
        self._output_path: Optional[Path] = Path(output_path).expanduser() if output_path else None
        self._owns_output = False
        self._path_lock = threading.Lock()

    @property
    def output_path(self) -> Optional[Path]:
        """Compiled document path, or None until the first write."""
        return self._output_path

    def template_context(self, theme_dir: Path) -> Dict[str, Any]:
        """Variables available to theme markup."""
        return {
            "debugMode": self.debug,
            "paths": {
                "root": self.root_dir.resolve().as_uri(),
                "theme": Path(theme_dir).resolve().as_uri(),
            },
        }

    def render(self, markup: str, theme_dir: Path) -> str:
        """
        Render template variables in ``markup``.

        Raises:
            ThemeRenderError: If the markup is not a valid template
        """
        try:
            template = self.environment.from_string(markup)
            return template.render(**self.template_context(theme_dir))
        except TemplateError as e:
            raise ThemeRenderError(f"Failed to render theme template: {e}") from e

    def finalize(self, markup: str, theme_dir: Path) -> Path:
        """
        Render ``markup`` and write it to the compiled document path.

        Returns:
            Path of the written document

        Raises:
            ThemeRenderError: If rendering fails
            WriteError: If the document cannot be written
        """
        rendered = self.render(markup, theme_dir)
        if self.title:
            rendered = pin_title(rendered, self.title)
        path = self._allocate()

        try:
            path.write_text(rendered, encoding="utf-8")
        except OSError as e:
            raise WriteError(path, str(e)) from e

        logger.debug(f"Wrote compiled document {path} ({len(rendered)} chars)")
        return path

    def cleanup(self) -> None:
        """Remove the temporary document if this finalizer created it."""
        with self._path_lock:
            if self._owns_output and self._output_path:
                try:
                    self._output_path.unlink()
                    logger.debug(f"Removed compiled document {self._output_path}")
                except FileNotFoundError:
                    pass
                except OSError as e:
                    logger.warning(f"Could not remove {self._output_path}: {e}")

    def _allocate(self) -> Path:
        with self._path_lock:
            if self._output_path is None:
                try:
                    fd, name = tempfile.mkstemp(prefix="deskstat-", suffix=".html")
                except OSError as e:
                    raise WriteError(tempfile.gettempdir(), f"cannot create temp file ({e})") from e
                os.close(fd)
                self._output_path = Path(name)
                self._owns_output = True
                logger.info(f"Setup temp file {self._output_path}")
            return self._output_path
