"""Factory for building the shared note dependencies.

Every CLI command calls build_services() so notes are always wired the same
way: one config, one renderer, one storage backend, one logger.
"""

import logging
from pathlib import Path

from exo.core.config import ExoConfig, load_config
from exo.core.storage import FileStorage, StorageBackend
from exo.core.templates import DeadlineRenderer, TemplateManager, TemplateRenderer
from exo.core.types import NoteServices


def build_services(
    config: ExoConfig | None = None,
    config_path: Path | str | None = None,
    renderer: TemplateRenderer | None = None,
    storage: StorageBackend | None = None,
    logger: logging.Logger | None = None,
) -> NoteServices:
    """
    Build a fully configured NoteServices instance.

    Args:
        config: Resolved configuration (loaded from config_path if omitted)
        config_path: Explicit config file to load
        renderer: Template renderer (defaults to a TemplateManager over the
            configured template dir, with the configured render deadline)
        storage: Storage backend (defaults to FileStorage)
        logger: Logger handed to notes (defaults to the "exo.notes" logger)

    Returns:
        NoteServices ready to pass to note constructors
    """
    actual_config = config or load_config(config_path)

    if renderer is None:
        renderer = TemplateManager(actual_config.dir.template_dir)
        timeout = actual_config.general.render_timeout
        if timeout:
            renderer = DeadlineRenderer(renderer, timeout)

    return NoteServices(
        config=actual_config,
        renderer=renderer,
        storage=storage or FileStorage(),
        logger=logger or logging.getLogger("exo.notes"),
    )
