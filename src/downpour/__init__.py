__all__ = [
    "LoadRunner",
    "run",
    "AiohttpClient",
    "HttpClient",
    "TokenSource",
    "classify_failure",
    "DEFAULT_SIGNATURES",
    "Category",
    "Outcome",
    "PrintMode",
    "ProgramArgs",
    "RunReport",
    "RunState",
]


from .core import LoadRunner, run
from .client import AiohttpClient, HttpClient
from .throttling import TokenSource
from .classifier import classify_failure, DEFAULT_SIGNATURES
from .models import Category, Outcome, PrintMode, ProgramArgs, RunReport
from .metrics import RunState
