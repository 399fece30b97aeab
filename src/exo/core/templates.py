"""Template rendering for note content.

Templates are Jinja2 files named ``<name>.md``. User templates in the
configured template directory take precedence over the defaults shipped with
the package. Rendering is strict: a field referenced by the template but
missing from the data is an error, not an empty string.
"""

import logging
import shutil
import threading
import time
from collections.abc import Callable, Mapping
from concurrent.futures import Future
from concurrent.futures import TimeoutError as FuturesTimeoutError
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Literal, Protocol

import jinja2

from exo.core.errors import (
    DeadlineExceededError,
    RenderError,
    StorageError,
    TemplateError,
    TemplateNotFoundError,
)

logger = logging.getLogger(__name__)

# Default templates (shipped with package)
DEFAULT_TEMPLATES_DIR = Path(__file__).parent.parent / "resources" / "templates"
DEFAULT_EXTENSION = ".md"
BACKUP_EXTENSION = ".bak"


class TemplateRenderer(Protocol):
    """Renders a named template with arbitrary data."""

    def render(self, name: str, data: Any) -> str:
        pass


@dataclass(frozen=True)
class TemplateInfo:
    """A template available to the renderer."""

    name: str
    source: Literal["custom", "builtin"]
    path: Path


def _template_context(data: Any) -> dict[str, Any]:
    """Expose mappings as variables, other objects as ``data`` plus attributes."""
    if data is None:
        return {}
    if isinstance(data, Mapping):
        return {str(k): v for k, v in data.items()}
    context = {
        k: v for k, v in getattr(data, "__dict__", {}).items() if not k.startswith("_")
    }
    context["data"] = data
    return context


class TemplateManager:
    """Jinja2-backed TemplateRenderer over user and default template dirs."""

    def __init__(
        self,
        template_dir: Path | str,
        extension: str = DEFAULT_EXTENSION,
        default_dir: Path | str | None = DEFAULT_TEMPLATES_DIR,
    ):
        """
        Initialize template manager.

        Args:
            template_dir: User template directory (may not exist yet)
            extension: Template file extension, with or without the dot
            default_dir: Directory of built-in templates, None to disable
        """
        if not str(template_dir).strip():
            raise TemplateError("template directory is required")
        if not extension.startswith("."):
            extension = "." + extension

        self.template_dir = Path(template_dir)
        self.extension = extension
        self.default_dir = Path(default_dir) if default_dir else None

        search_path = [str(self.template_dir)]
        if self.default_dir is not None:
            search_path.append(str(self.default_dir))

        self._env = jinja2.Environment(
            loader=jinja2.FileSystemLoader(search_path, encoding="utf-8"),
            undefined=jinja2.StrictUndefined,
            keep_trailing_newline=True,
            autoescape=False,
        )
        logger.debug(f"Template manager ready: {search_path}")

    def _filename(self, name: str) -> str:
        if not name or not name.strip():
            raise TemplateError("template name cannot be empty", operation="render")
        return f"{name}{self.extension}"

    def render(self, name: str, data: Any) -> str:
        """
        Render a template.

        Args:
            name: Template name without extension
            data: Mapping of variables, or an object whose attributes are used

        Returns:
            Rendered text

        Raises:
            TemplateError: Empty template name
            TemplateNotFoundError: No template with that name
            RenderError: Malformed template or data mismatch
        """
        filename = self._filename(name)
        logger.debug(f"Processing template {name!r}")
        try:
            template = self._env.get_template(filename)
        except jinja2.TemplateNotFound as e:
            logger.error(f"Template not found: {name!r}")
            raise TemplateNotFoundError(
                f"template {name!r} not found", operation="render"
            ) from e
        except jinja2.TemplateSyntaxError as e:
            logger.error(f"Failed to parse template {name!r}: {e}")
            raise RenderError(
                f"failed to parse template {name!r}: {e}", operation="render"
            ) from e

        try:
            rendered = template.render(_template_context(data))
        except (jinja2.TemplateError, TypeError, ValueError, AttributeError) as e:
            logger.error(f"Failed to execute template {name!r}: {e}")
            raise RenderError(
                f"failed to execute template {name!r}: {e}", operation="render"
            ) from e

        logger.info(f"Successfully processed template {name!r}")
        return rendered

    def load_template(self, name: str) -> str:
        """Return the raw source of a template."""
        filename = self._filename(name)
        try:
            source, _, _ = self._env.loader.get_source(self._env, filename)
        except jinja2.TemplateNotFound as e:
            raise TemplateNotFoundError(
                f"template {name!r} not found", operation="load_template"
            ) from e
        return source

    def list_templates(self) -> list[TemplateInfo]:
        """List custom and built-in templates; custom ones shadow built-ins."""
        found: dict[str, TemplateInfo] = {}
        if self.default_dir is not None and self.default_dir.is_dir():
            for path in self.default_dir.glob(f"*{self.extension}"):
                found[path.stem] = TemplateInfo(path.stem, "builtin", path)
        if self.template_dir.is_dir():
            for path in self.template_dir.glob(f"*{self.extension}"):
                if path.is_file():
                    found[path.stem] = TemplateInfo(path.stem, "custom", path)
        logger.debug(f"Listed {len(found)} templates")
        return [found[name] for name in sorted(found)]


class DeadlineRenderer:
    """Wraps a renderer so each render races against a timeout.

    Each render runs on a daemon thread, so an abandoned render never keeps
    the process alive. At most one render is in flight: while an abandoned
    render is still running, new renders wait for it within their own
    deadline.
    """

    def __init__(self, renderer: TemplateRenderer, timeout: float):
        if timeout <= 0:
            raise ValueError("timeout must be positive")
        self.renderer = renderer
        self.timeout = timeout
        self._slot = threading.BoundedSemaphore(1)

    def _run(self, future: Future, name: str, data: Any) -> None:
        try:
            if future.set_running_or_notify_cancel():
                try:
                    future.set_result(self.renderer.render(name, data))
                except BaseException as e:
                    future.set_exception(e)
        finally:
            self._slot.release()

    def _deadline_exceeded(self, name: str) -> DeadlineExceededError:
        logger.warning(f"Template {name!r} did not render within {self.timeout}s")
        return DeadlineExceededError(
            f"rendering template {name!r} exceeded {self.timeout}s deadline",
            operation="render",
        )

    def render(self, name: str, data: Any) -> str:
        """Render, raising DeadlineExceededError if the timeout elapses first."""
        deadline = time.monotonic() + self.timeout
        if not self._slot.acquire(timeout=self.timeout):
            raise self._deadline_exceeded(name)

        future: Future = Future()
        thread = threading.Thread(
            target=self._run, args=(future, name, data), name="exo-render", daemon=True
        )
        thread.start()
        try:
            return future.result(timeout=max(deadline - time.monotonic(), 0))
        except FuturesTimeoutError as e:
            raise self._deadline_exceeded(name) from e


def create_backup(path: Path) -> Path:
    """
    Move an existing file aside to ``<file>.bak``.

    If that backup already exists a timestamped name is used instead.

    Returns:
        Path of the backup
    """
    backup = path.with_name(path.name + BACKUP_EXTENSION)
    if backup.exists():
        stamp = datetime.now().strftime("%Y%m%d%H%M%S")
        backup = path.with_name(f"{path.name}.{stamp}{BACKUP_EXTENSION}")
    path.rename(backup)
    return backup


def install_default_templates(
    target_dir: Path | str,
    force: bool = False,
    confirm: Callable[[str], bool] | None = None,
    default_dir: Path | str = DEFAULT_TEMPLATES_DIR,
) -> list[str]:
    """
    Copy built-in templates into the user template directory.

    Args:
        target_dir: Destination directory (created if missing)
        force: Overwrite existing files without asking
        confirm: Called with the file name when a file exists and force is
            off; returning True overwrites it. Without it, existing files
            are kept.
        default_dir: Source of the built-in templates

    Returns:
        Names of the files written
    """
    if not str(target_dir).strip():
        raise TemplateError("target directory cannot be empty", operation="install")

    target = Path(target_dir)
    source = Path(default_dir)
    installed: list[str] = []
    try:
        target.mkdir(parents=True, exist_ok=True)
        for template in sorted(source.glob(f"*{DEFAULT_EXTENSION}")):
            dest = target / template.name
            if dest.exists():
                if not force and not (confirm and confirm(template.name)):
                    logger.info(f"Keeping existing template {dest}")
                    continue
                backup = create_backup(dest)
                logger.info(f"Backed up {dest} to {backup}")
            shutil.copyfile(template, dest)
            installed.append(template.name)
    except OSError as e:
        raise StorageError(
            f"failed to install default templates: {e}", operation="install", path=target
        ) from e

    logger.info(f"Installed {len(installed)} default templates into {target}")
    return installed
