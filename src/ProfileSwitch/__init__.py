"""ProfileSwitch package exports."""

from .stores import __all__ as _stores_all
from .switching import __all__ as _switching_all
from .cli import __all__ as _cli_all

__version__ = "0.1.0"

__all__ = [
    *_cli_all,
    *_stores_all,
    *_switching_all,
]
