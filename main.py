"""Convenience launcher: `python main.py` runs the link embedder."""
from embedder.main import run_bot

if __name__ == "__main__":
    run_bot()
