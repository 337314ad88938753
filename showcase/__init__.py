from importlib.metadata import PackageNotFoundError
from importlib.metadata import version

try:
    __version__ = version("showcase")
except PackageNotFoundError:
    # Running from a source checkout that was never pip-installed.
    __version__ = "0.0.0"
