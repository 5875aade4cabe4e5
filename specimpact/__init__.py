"""specimpact - find the tests impacted by a single commit."""

# Load .env so SPECIMPACT_* overrides are visible to every entry point
# (CLI, pytest, library use) that imports specimpact.
from dotenv import load_dotenv

load_dotenv()

# Keep in sync with pyproject.toml [project] version.
__version__ = "0.1.0"
