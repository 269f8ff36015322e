__version__ = "dev"

from .main import run

__all__ = ["run", "__version__"]
