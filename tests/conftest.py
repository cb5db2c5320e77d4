"""Pytest configuration: make `tierdict` importable and keep tests offline."""

import os
import sys
import tempfile
from pathlib import Path

_SRC = Path(__file__).resolve().parents[1] / "src"
if str(_SRC) not in sys.path:
    sys.path.insert(0, str(_SRC))

# strict モードでは local プロバイダが拒否されるため、テストは非 strict で動かす
os.environ.setdefault("STRICT_MODE", "false")
os.environ.setdefault("LLM_PROVIDER", "local")
os.environ.setdefault("LLM_REQUEST_DELAY_MS", "0")
# import 時に作られるモジュール既定ストアをリポジトリ外に逃がす
os.environ.setdefault(
    "DB_PATH", str(Path(tempfile.mkdtemp(prefix="tierdict-tests-")) / "store.sqlite3")
)
