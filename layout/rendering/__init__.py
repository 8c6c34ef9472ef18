"""Template rendering and condition evaluation."""
from layout.rendering.conditions import Condition
from layout.rendering.engine import Renderer, render

__all__ = ['Condition', 'Renderer', 'render']
