"""Data models for layout."""
from layout.models.manifest import (
    Computed,
    Default,
    Delimiters,
    Hook,
    Manifest,
    Prompt,
    Runnable,
    VarType,
)

__all__ = [
    'Computed',
    'Default',
    'Delimiters',
    'Hook',
    'Manifest',
    'Prompt',
    'Runnable',
    'VarType',
]
