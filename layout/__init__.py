"""layout - create new projects from templates.

A layout is a directory holding a ``layout.yaml`` manifest and a ``content``
tree. The manifest declares questions, computed values and hooks; the
content tree is copied into the destination and rendered through them.
"""

__version__ = "0.1.0"
