"""
Entry point for running post-analyzer as a module.

Usage:
    python -m post_analyzer --help
    python -m post_analyzer analyze flyer.png --show-text
"""
from post_analyzer.cli import app


if __name__ == "__main__":
    app()
