"""kysy: ask a local inference server programming questions from the shell."""

__version__ = "0.1.0"
