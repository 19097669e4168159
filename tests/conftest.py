# tests/conftest.py
# Puts the repository root on sys.path so "import jackc" works without installing.
import sys
import os

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))

if ROOT not in sys.path:
    sys.path.insert(0, ROOT)
