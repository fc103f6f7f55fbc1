import os
import sys
from pathlib import Path

# Ensure project root (containing listquery/) is importable when tests are run from any cwd.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

# Default test DB to an in-memory SQLite so pytest never touches a real database.
# If LISTQUERY_DB_URL is already set in the shell, keep that value.
os.environ.setdefault("LISTQUERY_DB_URL", "sqlite://")
os.environ.setdefault("LISTQUERY_STORE", "sql")
