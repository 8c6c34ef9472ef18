"""End-to-end deployment of a layout into a destination directory."""
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from layout.core.context import RunContext, background
from layout.core.errors import LayoutError, ManifestError, VersionMismatch
from layout.core.fs_tree import copy_tree
from layout.core.hooks import ShellRunner, execute_hooks
from layout.core.logger import get_logger
from layout.core.manifest_loader import CONTENT_DIR, ManifestLoader
from layout.core.state import ask_state, compute_defaults, compute_values
from layout.core.transform import render_contents, render_names
from layout.core.versions import satisfies
from layout.models.manifest import Manifest
from layout.rendering.engine import Renderer
from layout.services.git_client import GitClient
from layout.services.source import resolve_source
from layout.ui.simple import SimpleUI
from layout.ui.types import UI

logger = get_logger(__name__)

MAGIC_VAR_DIR = "dirname"


@dataclass
class DeployConfig:
    """Settings of one deployment.

    Attributes:
        source: Path to a layout directory, git URL, shorthand or ``alias:repo``
        target: Destination directory, created when missing
        aliases: Alias to URL pattern mapping, patterns may contain {0}
        default_pattern: Pattern for shorthand sources (default: GitHub over SSH)
        display: Dialog used for questions (default: SimpleUI on stdin/stdout)
        version: Current application version for manifest constraints, empty skips the check
        ask_once: Fail on the first invalid answer instead of asking again
        defaults: Global values applied after manifest defaults and before prompts
        git: Git client for remote sources
        shell: Runner for inline hooks
    """

    source: str
    target: Union[str, Path]
    aliases: Dict[str, str] = field(default_factory=dict)
    default_pattern: str = ""
    display: Optional[UI] = None
    version: str = ""
    ask_once: bool = False
    defaults: Dict[str, Any] = field(default_factory=dict)
    git: Optional[GitClient] = None
    shell: Optional[ShellRunner] = None


def select_manifest(loader: ManifestLoader, display: UI, manifests: List[Path]) -> Path:
    """Pick one manifest: the only one, or the one chosen by title.

    Raises:
        ManifestError: If there is no manifest or the answer is not a known title
    """
    if not manifests:
        raise ManifestError("no manifests files discovered")
    if len(manifests) == 1:
        return manifests[0]

    titles = loader.titles(manifests)
    picked = display.select_one("Which to use", titles[0], titles)
    for path, title in zip(manifests, titles):
        if title == picked:
            return path
    raise ManifestError(f"picked unknown manifest {picked!r}")


def check_version(manifest: Manifest, current: str) -> None:
    """Raise VersionMismatch if ``current`` does not satisfy the manifest constraint."""
    if not satisfies(manifest.version, current):
        raise VersionMismatch(
            f"manifest version constraint ({manifest.version}) requires another version "
            f"of application (current {current})"
        )


def render_to(
    ctx: RunContext,
    manifest: Manifest,
    manifest_file: Union[str, Path],
    target_dir: Union[str, Path],
    display: UI,
    ask_once: bool = False,
    defaults: Optional[Dict[str, Any]] = None,
    shell: Optional[ShellRunner] = None,
) -> Dict[str, Any]:
    """Resolve state and generate ``target_dir`` from the manifest's content tree.

    Args:
        ctx: Run context
        manifest: Parsed manifest
        manifest_file: Path of the manifest; its directory holds ``content``
            and is the base for includes and hook scripts
        target_dir: Destination directory
        display: Dialog for questions, titles and hook labels
        ask_once: Fail on the first invalid answer
        defaults: Global values applied after manifest defaults
        shell: Runner for inline hooks

    Returns:
        Final state

    Raises:
        LayoutError: On any failure, with the failing step in the message
    """
    manifest_file = Path(manifest_file)
    layout_dir = manifest_file.parent
    target_dir = Path(os.path.abspath(target_dir))
    content_dir = layout_dir / CONTENT_DIR

    if manifest.title:
        display.title(manifest.title)

    renderer = Renderer({MAGIC_VAR_DIR: target_dir.name}, manifest.delimiters)

    try:
        compute_defaults(manifest.defaults, renderer)
    except LayoutError as exc:
        raise type(exc)(f"compute defaults: {exc}") from exc

    for name, value in (defaults or {}).items():
        renderer.save(name, value)

    try:
        ask_state(ctx, display, manifest.prompts, manifest_file, renderer, ask_once)
    except LayoutError as exc:
        raise type(exc)(f"get values for prompts: {exc}") from exc

    compute_values(ctx, manifest.computed, renderer)

    ctx.check()
    logger.debug(f"Creating {target_dir}")
    try:
        target_dir.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise LayoutError(f"create destination {target_dir}: {exc}") from exc

    if content_dir.is_dir():
        tree = copy_tree(content_dir, target_dir)
        logger.debug(f"Copied {len(tree.paths()) - 1} entries into {target_dir}")
    else:
        logger.warning(f"Layout {layout_dir} has no {CONTENT_DIR} directory")

    execute_hooks(ctx, manifest.before, renderer, target_dir, layout_dir, display, "pre-generate hook", shell)

    ctx.check()
    try:
        render_names(target_dir, renderer)
    except LayoutError as exc:
        raise type(exc)(f"render files names: {exc}") from exc

    try:
        render_contents(target_dir, renderer, manifest.ignore)
    except LayoutError as exc:
        raise type(exc)(f"render files content: {exc}") from exc

    execute_hooks(ctx, manifest.after, renderer, target_dir, layout_dir, display, "post-generate hook", shell)
    logger.info(f"Generated {target_dir} from {manifest.display_title(layout_dir.name)}")

    return renderer.state


def deploy(config: DeployConfig, ctx: Optional[RunContext] = None) -> Dict[str, Any]:
    """Fetch the layout, pick its manifest, ask questions and render the target.

    Returns:
        Final state

    Raises:
        LayoutError: On any failure
    """
    ctx = ctx or background()
    display = config.display or SimpleUI()
    target_dir = Path(os.path.abspath(config.target))

    with resolve_source(ctx, config.source, config.aliases, config.default_pattern, config.git) as project_dir:
        loader = ManifestLoader(project_dir)
        manifest_file = select_manifest(loader, display, loader.find_manifests())
        manifest = loader.load(manifest_file)
        check_version(manifest, config.version)

        logger.debug(f"Rendering {manifest_file} into {target_dir}")
        return render_to(
            ctx,
            manifest,
            manifest_file,
            target_dir,
            display,
            ask_once=config.ask_once,
            defaults=config.defaults,
            shell=config.shell,
        )
