"""PR Review Bot - multi-analyzer pull request reviewer."""

__version__ = "0.3.0"
