"""
Script to check that a Rigveda corpus file loads cleanly.

Usage:
    python scripts/check_corpus.py [path/to/rigveda.json]
"""

import sys
import os

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from app.core.config import settings
from app.core.errors import StartupError
from app.services.verse_store import VerseStore


def summarize(store: VerseStore) -> dict:
    """Verse, mandala and distinct deity counts for a loaded corpus."""
    records = store.get_all()
    return {
        "verses": len(records),
        "mandalas": len({str(r.mandala) for r in records}),
        "deities": len({d.lower() for r in records for d in r.deities}),
    }


def check_corpus(path: str) -> int:
    print(f"Loading corpus from: {path}")
    try:
        store = VerseStore.load(path)
    except StartupError as e:
        print(f"Error: {e}")
        return 1

    summary = summarize(store)
    print(f"Verses:   {summary['verses']}")
    print(f"Mandalas: {summary['mandalas']}")
    print(f"Deities:  {summary['deities']}")
    return 0


if __name__ == "__main__":
    corpus_path = sys.argv[1] if len(sys.argv) > 1 else settings.RIGVEDA_DATA_PATH
    sys.exit(check_corpus(corpus_path))
