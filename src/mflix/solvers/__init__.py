"""mflix.solvers -- 各层中转页解析、路由表与单链接解析流水线"""

from .client import SolverClient, encode_link
from .config import SolverConfig, load_solver_config
from .exceptions import (
    ScanError,
    StageError,
    StageFetchError,
    StageNotFoundError,
    StageUpstreamError,
    UnrecognizedLinkError,
)
from .models import SolveResult
from .pipeline import EventSink, LinkRun, ResolutionPipeline
from .profiles import ClientProfile
from .registry import StageRegistry, StageRule, default_rules
from .scanner import HtmlPageScanner, PageScanner, ScannedLink, ScanResult

__all__ = [
    "ClientProfile",
    "EventSink",
    "HtmlPageScanner",
    "LinkRun",
    "PageScanner",
    "ResolutionPipeline",
    "ScanError",
    "ScanResult",
    "ScannedLink",
    "SolveResult",
    "SolverClient",
    "SolverConfig",
    "StageError",
    "StageFetchError",
    "StageNotFoundError",
    "StageRegistry",
    "StageRule",
    "StageUpstreamError",
    "UnrecognizedLinkError",
    "default_rules",
    "encode_link",
    "load_solver_config",
]
