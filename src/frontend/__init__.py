"""Parse-and-bind stage shared by all lint rules."""

from .pipeline import FrontEndResult, run_frontend

__all__ = ["FrontEndResult", "run_frontend"]
