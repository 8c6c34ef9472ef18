"""State resolution: defaults, prompts (with includes) and computed values.

The state is a plain dict owned by a :class:`~layout.rendering.engine.Renderer`
and threaded explicitly through every phase::

    renderer = Renderer({"dirname": "demo"})
    compute_defaults(manifest.defaults, renderer)
    ask_state(ctx, ui, manifest.prompts, manifest_file, renderer)
    compute_values(ctx, manifest.computed, renderer)
"""
from pathlib import Path
from typing import Any, List, Optional, Sequence, TypeVar, Union

import yaml
from pydantic import ValidationError

from layout.core.context import RunContext
from layout.core.errors import Cancelled, InvalidInput, Interrupted, LayoutError, ManifestError
from layout.core.logger import get_logger
from layout.models.manifest import Computed, Default, Prompt, VarType
from layout.rendering.conditions import Condition
from layout.rendering.engine import Renderer
from layout.ui.types import UI

logger = get_logger(__name__)

E = TypeVar("E", bound=LayoutError)


def _wrap(exc: E, message: str) -> E:
    """Same error kind with extra location context."""
    if isinstance(exc, Cancelled):
        return exc
    wrapped = type(exc)(f"{message}: {exc}")
    wrapped.__cause__ = exc
    return wrapped


def render_prompt(prompt: Prompt, renderer: Renderer) -> Prompt:
    """Return a copy of ``prompt`` with label, include, default and options rendered."""
    try:
        label = renderer.render(prompt.label)
    except LayoutError as exc:
        raise _wrap(exc, "render label")
    try:
        include = renderer.render(prompt.include)
    except LayoutError as exc:
        raise _wrap(exc, "render include")

    default = prompt.default
    if isinstance(default, str):
        try:
            default = renderer.render(default)
        except LayoutError as exc:
            raise _wrap(exc, "render default")

    options = []
    for i, option in enumerate(prompt.options):
        try:
            options.append(renderer.render(option))
        except LayoutError as exc:
            raise _wrap(exc, f"render option {i}")

    return prompt.model_copy(
        update={"label": label, "include": include, "default": default, "options": options}
    )


def load_prompts(path: Path) -> List[Prompt]:
    """Load a prompt list from YAML; multiple documents are concatenated.

    Raises:
        ManifestError: If the file is not a list of prompts
    """
    prompts: List[Prompt] = []
    try:
        with open(path) as f:
            for document in yaml.safe_load_all(f):
                if document is None:
                    continue
                if not isinstance(document, list):
                    raise ManifestError(f"{path}: prompts document must be a list")
                prompts.extend(Prompt.model_validate(item) for item in document)
    except yaml.YAMLError as exc:
        raise ManifestError(f"parse {path}: {exc}") from exc
    except ValidationError as exc:
        raise ManifestError(f"invalid prompt in {path}: {exc}") from exc
    except OSError as exc:
        raise ManifestError(f"read {path}: {exc}") from exc
    return prompts


def resolve_include(include: str, base_file: Optional[Path]) -> Path:
    """Resolve ``include`` relative to the directory of the declaring file."""
    base_dir = base_file.parent if base_file is not None else Path(".")
    return base_dir / include


def ask(prompt: Prompt, ui: UI) -> Any:
    """Ask the value for one rendered prompt and convert it to the declared type.

    Raises:
        InvalidInput: If the answer cannot be converted or is not an allowed option
        Interrupted: If input ended or was interrupted
    """
    question = prompt.question()
    if prompt.type is VarType.LIST:
        if not prompt.options:
            return ui.ask_many(question, prompt.default_options())
        return ui.choose_many(question, prompt.default_options(), prompt.options)

    if prompt.options:
        value = ui.select_one(question, prompt.default_option(), prompt.options)
    else:
        value = ui.ask_one(question, prompt.default_option())
    return prompt.type.parse(value)


def ask_state(
    ctx: RunContext,
    ui: UI,
    prompts: Sequence[Prompt],
    base_file: Optional[Union[str, Path]],
    renderer: Renderer,
    ask_once: bool = False,
) -> None:
    """Process ``prompts`` in order, saving answers into the renderer state.

    Args:
        ctx: Run context, checked before every prompt
        ui: Dialog used to ask values and report invalid answers
        prompts: Prompt declarations
        base_file: File declaring ``prompts``; includes resolve against its directory
        renderer: Renderer owning the state
        ask_once: Fail on the first invalid answer instead of asking again

    Raises:
        Cancelled: If the run was cancelled
        LayoutError: On condition, render, include or input failures
    """
    base_path = Path(base_file) if base_file else None
    where = str(base_path) if base_path else "<prompts>"

    for i, declared in enumerate(prompts):
        ctx.check()

        try:
            execute = Condition(declared.when).ok(renderer.state)
        except LayoutError as exc:
            raise _wrap(exc, f"condition in step {i} in {where}")
        if not execute:
            logger.debug(f"Skip step {i} in {where} ({declared.var or declared.include})")
            continue

        try:
            prompt = render_prompt(declared, renderer)
        except LayoutError as exc:
            raise _wrap(exc, f"render step {i} in {where}")

        if prompt.include:
            child_file = resolve_include(prompt.include, base_path)
            logger.debug(f"Include {child_file} from step {i} in {where}")
            try:
                children = load_prompts(child_file)
                ask_state(ctx, ui, children, child_file, renderer, ask_once)
            except LayoutError as exc:
                raise _wrap(exc, f"step {i}, file {where}, include {prompt.include}")
            continue

        while True:
            try:
                value = ask(prompt, ui)
            except Interrupted as exc:
                ctx.check()
                raise _wrap(exc, f"ask value for {prompt.var} (step {i}) in {where}")
            except InvalidInput as exc:
                if ask_once:
                    raise _wrap(exc, f"ask value for {prompt.var} (step {i}) in {where}")
                ctx.check()
                ui.error(str(exc))
                continue
            break

        logger.debug(f"Set {prompt.var} from step {i} in {where}")
        renderer.save(prompt.var, value)

    ctx.check()


def _compute(var: str, value: Any, var_type: VarType, renderer: Renderer) -> None:
    if not isinstance(value, str):
        renderer.save(var, value)
        return

    try:
        rendered = renderer.render(value)
    except LayoutError as exc:
        raise _wrap(exc, "render value")
    try:
        parsed = var_type.parse(rendered)
    except InvalidInput as exc:
        raise _wrap(exc, "parse value")
    renderer.save(var, parsed)


def compute_defaults(defaults: Sequence[Default], renderer: Renderer) -> None:
    """Set every default value, ignoring conditions.

    Raises:
        LayoutError: If a value cannot be rendered or converted
    """
    for i, default in enumerate(defaults):
        try:
            _compute(default.var, default.value, default.type, renderer)
        except LayoutError as exc:
            raise _wrap(exc, f"compute default #{i} ({default.var})")
        logger.debug(f"Default {default.var} computed")


def compute_values(ctx: RunContext, computed: Sequence[Computed], renderer: Renderer) -> None:
    """Set computed values whose condition holds.

    A skipped entry is not rendered at all and leaves its variable unset.

    Raises:
        LayoutError: If a condition, render or conversion fails
    """
    for i, item in enumerate(computed):
        ctx.check()
        try:
            if not Condition(item.when).ok(renderer.state):
                logger.debug(f"Skip computed #{i} ({item.var})")
                continue
            _compute(item.var, item.value, item.type, renderer)
        except LayoutError as exc:
            raise _wrap(exc, f"compute value #{i} ({item.var})")
        logger.debug(f"Computed {item.var}")
