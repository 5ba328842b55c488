import importlib.util
import json
from pathlib import Path

from conftest import SAMPLE_VERSES

SCRIPT = Path(__file__).resolve().parent.parent / "scripts" / "check_corpus.py"


def load_script():
    spec = importlib.util.spec_from_file_location("check_corpus", SCRIPT)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


def test_reports_counts(tmp_path, capsys):
    path = tmp_path / "rigveda.json"
    path.write_text(json.dumps(SAMPLE_VERSES), encoding="utf-8")

    assert load_script().check_corpus(str(path)) == 0

    out = capsys.readouterr().out
    assert "Verses:   4" in out
    assert "Mandalas: 3" in out
    assert "Deities:  3" in out


def test_bad_file_exits_nonzero(tmp_path, capsys):
    assert load_script().check_corpus(str(tmp_path / "missing.json")) == 1
    assert "Error:" in capsys.readouterr().out
