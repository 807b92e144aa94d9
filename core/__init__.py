"""core package initialization.

Making `core` an explicit package so imports like `import core.registry`
work reliably when running `main.py` from the project root.
"""

__all__ = ["app", "constants", "content", "log", "nbt", "registry", "save",
           "tiles", "tuning"]
