import os
import sys
import tempfile

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

# Settings are read once at import time, so the test database has to be chosen first.
_TMP = tempfile.mkdtemp(prefix="apiforge-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_TMP, 'apiforge.db')}"
os.environ["MODELS_DIR"] = os.path.join(_TMP, "models")
os.environ["JWT_SECRET"] = "test-secret"
os.environ["ADMIN_USERNAME"] = "admin"
