# promptassembler/main.py
import sys
import os

# Direct execution: make the package importable
if __package__ is None and not hasattr(sys, "frozen"):
    path = os.path.realpath(os.path.abspath(__file__))
    sys.path.insert(0, os.path.dirname(os.path.dirname(path)))

from promptassembler.cli import app

if __name__ == "__main__":
    app()
