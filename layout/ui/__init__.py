"""Dialog implementations for asking questions."""
from layout.ui.nice import NiceUI
from layout.ui.simple import SimpleUI
from layout.ui.types import UI, Dialog

__all__ = ["Dialog", "NiceUI", "SimpleUI", "UI"]
