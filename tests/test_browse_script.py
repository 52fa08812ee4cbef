"""Tests for scripts/browse.py"""
import importlib.util
from pathlib import Path

import dotenv

SCRIPT = Path(__file__).parent.parent / "scripts" / "browse.py"


def test_env_file_loaded_at_import(monkeypatch):
    """The .env file is read when the script module loads, before main() runs."""
    loaded = []
    monkeypatch.setattr(dotenv, "load_dotenv", lambda path: loaded.append(Path(path)))
    monkeypatch.setattr(Path, "exists", lambda self: True)

    spec = importlib.util.spec_from_file_location("browse_script", SCRIPT)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)

    assert loaded == [SCRIPT.parent.parent / ".env"]
    assert module.ENV_PATH == loaded[0]
