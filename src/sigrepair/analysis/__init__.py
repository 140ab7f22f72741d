"""File signature analysis and extension recovery."""

from .analyzer import FileAnalyzer, needs_extension_recovery
from .matcher import is_signature_match, match_signature
from .models import AnalysisResult, FileProbe
from .probe import current_extension, probe_file, read_hex_prefix
from .recovery import compute_renamed_name, rename_with_extension
from .text import TextHeuristicClassifier

__all__ = [
    "AnalysisResult",
    "FileAnalyzer",
    "FileProbe",
    "TextHeuristicClassifier",
    "compute_renamed_name",
    "current_extension",
    "is_signature_match",
    "match_signature",
    "needs_extension_recovery",
    "probe_file",
    "read_hex_prefix",
    "rename_with_extension",
]
