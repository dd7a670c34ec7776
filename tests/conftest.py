"""
Pytest configuration: make sure `import echeancier` works regardless of
where pytest is invoked, and point the SQLite store at a throw-away file.

Both happen **before** any test module (and therefore ``echeancier.db``)
is imported.
"""

import os
import sys
import tempfile
from pathlib import Path

# /path/to/project/tests -> project root
PROJECT_ROOT = Path(__file__).resolve().parent.parent

if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

os.environ.setdefault(
    "ECHEANCIER_DB_FILE",
    str(Path(tempfile.mkdtemp(prefix="echeancier-tests-")) / "test.db"),
)
