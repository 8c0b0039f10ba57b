"""Abogadai - client core for the Abogadai legal document service"""

__version__ = "1.0.0"
__description__ = "Client core for the Abogadai legal document service"

__all__ = ["main", "AbogadaiConsole", "__version__"]


def __getattr__(name: str):
    """Lazy import so the library modules load without the console's setup.

    Importing abogadai.config or abogadai.core does not create the session
    directory or start any background loop.
    """
    if name == "AbogadaiConsole":
        from .main import AbogadaiConsole

        return AbogadaiConsole
    if name == "main":
        from .main import main

        return main
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
