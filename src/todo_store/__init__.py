# src/todo_store/__init__.py

"""Task list persistence with a time-boxed recycle bin."""

__version__ = "0.1.0"
