"""
Memory Extraction Pipeline

Rule-based classification of conversation turns into memory note candidates:
the category gate, the field extractors and the extractor that assembles them.
"""

from pathlib import Path

PROJECT_ROOT = Path(__file__).parent.parent.parent.parent
CONFIG_PATH = PROJECT_ROOT / "args" / "memory.yaml"
