"""Manifest models for layout.yaml documents."""
import re
from enum import Enum
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from layout.core.errors import InvalidInput

TRUE_VALUES = {"t", "y", "true", "yes", "ok"}
INT64_MIN = -(2 ** 63)
INT64_MAX = 2 ** 63 - 1
INT_SYNTAX = re.compile(r"[+-]?[0-9]+")


class VarType(str, Enum):
    """Declared type of a variable."""

    STR = "str"
    BOOL = "bool"
    INT = "int"
    FLOAT = "float"
    LIST = "list"

    def parse(self, value: str) -> Any:
        """Convert a rendered or typed string into this type.

        Raises:
            InvalidInput: If the string is not a valid int/float
        """
        if self is VarType.BOOL:
            return to_bool(value)
        if self is VarType.LIST:
            return to_list(value)
        if self is VarType.INT:
            if not INT_SYNTAX.fullmatch(value):
                raise InvalidInput(f"parse int {value!r}: invalid syntax")
            parsed = int(value, 10)
            if not INT64_MIN <= parsed <= INT64_MAX:
                raise InvalidInput(f"parse int {value!r}: value out of range")
            return parsed
        if self is VarType.FLOAT:
            if "_" in value or value != value.strip():
                raise InvalidInput(f"parse float {value!r}: invalid syntax")
            try:
                return float(value)
            except ValueError:
                raise InvalidInput(f"parse float {value!r}: invalid syntax") from None
        return value


def to_bool(line: str) -> bool:
    return line.lower() in TRUE_VALUES


def to_list(line: str) -> List[str]:
    """Split a comma-separated line, dropping empty items."""
    return [value.strip() for value in line.strip().split(",") if value.strip()]


class Delimiters(BaseModel):
    """Variable delimiters used by templates of one manifest."""

    model_config = ConfigDict(extra='forbid')

    open: str = "{{"
    close: str = "}}"

    @model_validator(mode='after')
    def fill_empty(self) -> 'Delimiters':
        if not self.open:
            self.open = "{{"
        if not self.close:
            self.close = "}}"
        return self


class Prompt(BaseModel):
    """Single question (or include of another prompt list)."""

    model_config = ConfigDict(extra='forbid')

    label: str = ""
    include: str = ""
    var: str = ""
    type: VarType = VarType.STR
    options: List[str] = Field(default_factory=list)
    default: Any = None
    when: str = ""

    @field_validator('type', mode='before')
    @classmethod
    def empty_type_as_str(cls, v):
        if v is None or v == "":
            return VarType.STR
        return v

    @field_validator('options', mode='before')
    @classmethod
    def stringify_options(cls, v):
        if v is None:
            return []
        if not isinstance(v, list):
            raise ValueError("options must be a list")
        return [str(item) for item in v]

    @model_validator(mode='after')
    def validate_target(self) -> 'Prompt':
        """Every prompt either asks for a variable or includes another file."""
        if not self.var and not self.include:
            raise ValueError("prompt requires either 'var' or 'include'")
        return self

    def question(self) -> str:
        return (self.label or self.var).rstrip("?")

    def default_option(self) -> str:
        if self.default is None:
            return ""
        if isinstance(self.default, bool):
            return "true" if self.default else "false"
        if isinstance(self.default, list):
            return ",".join(str(v) for v in self.default)
        return str(self.default)

    def default_options(self) -> List[str]:
        if isinstance(self.default, list):
            return [str(v) for v in self.default]
        opt = self.default_option()
        if not opt:
            return []
        return to_list(opt)


class Default(BaseModel):
    """Unconditional value computed before any prompt."""

    model_config = ConfigDict(extra='forbid')

    var: str
    value: Any = None
    type: VarType = VarType.STR

    @field_validator('type', mode='before')
    @classmethod
    def empty_type_as_str(cls, v):
        if v is None or v == "":
            return VarType.STR
        return v


class Computed(Default):
    """Value computed after prompts, optionally gated by a condition."""

    when: str = ""


class Runnable(BaseModel):
    """Inline shell text or a script invocation, both templated."""

    model_config = ConfigDict(extra='forbid')

    run: str = ""
    script: str = ""

    def what(self) -> str:
        """Describe what will be executed: script invocation or shell command."""
        return self.script or self.run


class Hook(Runnable):
    """Before/after generation hook."""

    label: str = ""
    when: str = ""

    @model_validator(mode='after')
    def validate_runnable(self) -> 'Hook':
        if not self.run and not self.script:
            raise ValueError("hook requires either 'run' or 'script'")
        return self


class Manifest(BaseModel):
    """Parsed layout.yaml document."""

    model_config = ConfigDict(extra='ignore', populate_by_name=True)

    title: str = ""
    description: str = ""
    version: str = ""
    delimiters: Delimiters = Field(default_factory=Delimiters)
    prompts: List[Prompt] = Field(default_factory=list)
    defaults: List[Default] = Field(default_factory=list, alias="default")
    computed: List[Computed] = Field(default_factory=list)
    before: List[Hook] = Field(default_factory=list)
    after: List[Hook] = Field(default_factory=list)
    ignore: List[str] = Field(default_factory=list)

    @field_validator('prompts', 'defaults', 'computed', 'before', 'after', 'ignore', mode='before')
    @classmethod
    def none_as_empty(cls, v):
        return [] if v is None else v

    @field_validator('delimiters', mode='before')
    @classmethod
    def none_as_default(cls, v):
        return {} if v is None else v

    @field_validator('version', mode='before')
    @classmethod
    def stringify_version(cls, v):
        """YAML reads ``version: 1.2`` as a float."""
        if v is None:
            return ""
        return str(v)

    def display_title(self, fallback: Optional[str] = None) -> str:
        return self.title or fallback or "untitled"
