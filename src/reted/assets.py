"""Front-end shell lookup.

The SPA fallback serves ``static/index.html`` from inside the installed
reted package.
"""

from importlib.resources import files
from pathlib import Path

SHELL_NAME = "index.html"


def get_static_dir() -> Path:
    """Locate the packaged static directory.

    Raises:
        FileNotFoundError: If the package carries no front-end shell
    """
    static = files("reted") / "static"
    if not (static / SHELL_NAME).is_file():
        raise FileNotFoundError(
            f"Front-end shell {SHELL_NAME} is missing from the reted package; "
            "place it in src/reted/static and reinstall."
        )
    return Path(str(static))
