"""
Language detection for a debug session.

Signals are checked in order of reliability: the debug adapter type, the
extension of the program being debugged, then marker files in the
workspace root.

valuelens/src/valuelens/detection.py
"""

import logging
from pathlib import Path
from typing import Dict, Optional, Sequence, Tuple, Union

from valuelens.models import Variant

logger = logging.getLogger(__name__)

__all__ = [
    "DEBUGGER_TYPES",
    "EXTENSIONS",
    "WORKSPACE_MARKERS",
    "detect_from_debugger_type",
    "detect_from_program",
    "detect_from_workspace",
    "detect_language",
]

DEBUGGER_TYPES: Dict[str, Variant] = {
    "go": Variant.GO,
    "dlv": Variant.GO,
    "python": Variant.PYTHON,
    "debugpy": Variant.PYTHON,
    "node": Variant.JAVASCRIPT,
    "node2": Variant.JAVASCRIPT,
    "pwa-node": Variant.JAVASCRIPT,
    "chrome": Variant.JAVASCRIPT,
    "pwa-chrome": Variant.JAVASCRIPT,
    "msedge": Variant.JAVASCRIPT,
    "typescript": Variant.JAVASCRIPT,
    "java": Variant.JAVA,
    "cppdbg": Variant.CPP,
    "cppvsdbg": Variant.CPP,
    "lldb": Variant.CPP,
    "gdb": Variant.CPP,
}

EXTENSIONS: Dict[str, Variant] = {
    ".go": Variant.GO,
    ".py": Variant.PYTHON,
    ".pyw": Variant.PYTHON,
    ".js": Variant.JAVASCRIPT,
    ".mjs": Variant.JAVASCRIPT,
    ".cjs": Variant.JAVASCRIPT,
    ".ts": Variant.JAVASCRIPT,
    ".tsx": Variant.JAVASCRIPT,
    ".java": Variant.JAVA,
    ".class": Variant.JAVA,
    ".jar": Variant.JAVA,
    ".cpp": Variant.CPP,
    ".cc": Variant.CPP,
    ".cxx": Variant.CPP,
    ".c++": Variant.CPP,
    ".c": Variant.CPP,
    ".h": Variant.CPP,
    ".hpp": Variant.CPP,
    ".hxx": Variant.CPP,
    ".exe": Variant.CPP,
}

# Checked in this order; the first variant with any matching marker wins.
WORKSPACE_MARKERS: Tuple[Tuple[Variant, Sequence[str]], ...] = (
    (Variant.JAVA, ("pom.xml", "build.gradle", "gradle.properties", "*.java")),
    (Variant.CPP, ("CMakeLists.txt", "Makefile", "makefile", "*.cpp", "*.cc", "*.cxx")),
    (Variant.JAVASCRIPT, ("package.json", "tsconfig.json")),
    (Variant.PYTHON, ("requirements.txt", "setup.py", "Pipfile", "pyproject.toml", "*.py")),
    (Variant.GO, ("go.mod", "go.sum", "*.go")),
)


def detect_from_debugger_type(debugger_type: Optional[str]) -> Optional[Variant]:
    if not debugger_type:
        return None
    return DEBUGGER_TYPES.get(debugger_type.strip().lower())


def detect_from_program(program: Optional[Union[str, Path]]) -> Optional[Variant]:
    if not program:
        return None
    name = Path(str(program)).name.lower()
    # Longest suffix first so ``.c++`` is not read as ``.c``
    for extension in sorted(EXTENSIONS, key=len, reverse=True):
        if name.endswith(extension):
            return EXTENSIONS[extension]
    return None


def detect_from_workspace(workspace: Optional[Union[str, Path]]) -> Optional[Variant]:
    """Match marker files in the workspace root (not recursive)."""
    if not workspace:
        return None
    root = Path(workspace)
    if not root.is_dir():
        logger.debug(f"Workspace {root} is not a directory")
        return None

    for variant, markers in WORKSPACE_MARKERS:
        for marker in markers:
            if "*" in marker:
                if next(root.glob(marker), None) is not None:
                    return variant
            elif (root / marker).exists():
                return variant
    return None


def detect_language(
    debugger_type: Optional[str] = None,
    program: Optional[Union[str, Path]] = None,
    workspace: Optional[Union[str, Path]] = None,
) -> Optional[Variant]:
    """Resolve the session language, or None when no signal matches."""
    for source, detect, value in (
        ("debugger type", detect_from_debugger_type, debugger_type),
        ("program", detect_from_program, program),
        ("workspace", detect_from_workspace, workspace),
    ):
        variant = detect(value)
        if variant is not None:
            logger.debug(f"Detected {variant} from {source} {value!r}")
            return variant

    logger.debug("No language signal matched")
    return None
