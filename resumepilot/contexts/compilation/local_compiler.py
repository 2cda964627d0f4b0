"""
Local LaTeX compilation.

Runs a TeX binary on this host as one more typesetting engine. Used when
LATEX_COMPILER is configured; remote engines remain the default.
"""

import asyncio
import re
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from resumepilot.contexts.compilation.logger import _log_debug, log_remote_body

# Caps on diagnostics kept from a single .log file
MAX_LOG_ERRORS = 5
MAX_LOG_WARNINGS = 10

SOURCE_NAME = "document.tex"


@dataclass
class LocalCompilation:
    """
    Result of a local compiler run.

    Attributes:
        document: PDF bytes (None if no PDF was produced)
        errors: Parsed LaTeX errors
        warnings: Parsed LaTeX warnings
        stdout: Combined compiler output of every pass
    """

    document: Optional[bytes] = None
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    stdout: str = ""


def parse_latex_log(log_content: str) -> tuple[List[str], List[str]]:
    """
    Parse LaTeX log output for errors and warnings.

    Works on .log files and on the plain-text error pages some remote
    services return instead of a PDF.

    Args:
        log_content: Log text

    Returns:
        Tuple of (errors, warnings), capped at MAX_LOG_ERRORS / MAX_LOG_WARNINGS
    """
    errors = []
    warnings = []

    # LaTeX error pattern: "! Error message"
    error_pattern = re.compile(r"^! (.+)$", re.MULTILINE)
    for match in error_pattern.finditer(log_content):
        errors.append(match.group(1).strip())

    # Error lines that don't start with "!"
    additional_error_patterns = [
        r"Undefined control sequence",
        r"File ended while scanning use of",
        r"Emergency stop",
        r"LaTeX Error:",
    ]
    for pattern in additional_error_patterns:
        match = re.search(rf"({pattern}.*?)$", log_content, re.MULTILINE)
        if match and not any(match.group(1) in err for err in errors):
            errors.append(match.group(1).strip())

    warning_patterns = [
        r"LaTeX Warning: (.+)",
        r"Package \w+ Warning: (.+)",
        r"Overfull \\hbox \((.+)\)",
        r"Underfull \\hbox \((.+)\)",
    ]
    for pattern in warning_patterns:
        for match in re.finditer(pattern, log_content, re.MULTILINE):
            warnings.append(match.group(1).strip())

    return errors[:MAX_LOG_ERRORS], warnings[:MAX_LOG_WARNINGS]


async def _run_pass(command: List[str], cwd: Path) -> tuple[int, str]:
    """
    Run one compiler pass.

    The process is killed and reaped if the surrounding task is cancelled.
    """
    process = await asyncio.create_subprocess_exec(
        *command,
        cwd=cwd,
        stdin=asyncio.subprocess.DEVNULL,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.STDOUT,
    )
    try:
        stdout, _ = await process.communicate()
    except asyncio.CancelledError:
        process.kill()
        await process.wait()
        raise
    # Replace invalid UTF-8 bytes instead of crashing
    return process.returncode, stdout.decode("utf-8", errors="replace")


async def compile_source(source: str, compiler: str, num_passes: int = 2) -> LocalCompilation:
    """
    Compile markup to PDF with a local TeX binary.

    Runs in a throwaway directory. Only the first pass is fatal; later passes
    resolve references and their failures are ignored when the first pass
    already produced a PDF.

    Args:
        source: Markup text
        compiler: Binary name or path (e.g. "pdflatex")
        num_passes: Number of passes (default: 2 for cross-references)

    Returns:
        LocalCompilation with the PDF bytes (if any) and parsed diagnostics

    Raises:
        FileNotFoundError: If the compiler binary does not exist
    """
    with tempfile.TemporaryDirectory(prefix="resumepilot_") as tmp:
        work_dir = Path(tmp)
        tex_file = work_dir / SOURCE_NAME
        tex_file.write_text(source, encoding="utf-8")

        command = [compiler, "-interaction=nonstopmode", "-halt-on-error", SOURCE_NAME]
        outputs = []
        for pass_number in range(1, max(num_passes, 1) + 1):
            returncode, stdout = await _run_pass(command, work_dir)
            outputs.append(stdout)
            _log_debug(f"{compiler} pass {pass_number} exited with {returncode}")
            if returncode != 0 and pass_number == 1:
                break

        # pdflatex writes log files in latin-1 encoding (font metadata contains non-UTF-8)
        log_file = tex_file.with_suffix(".log")
        errors, warnings = [], []
        if log_file.exists():
            errors, warnings = parse_latex_log(log_file.read_text(encoding="latin-1"))

        pdf_file = tex_file.with_suffix(".pdf")
        document = pdf_file.read_bytes() if pdf_file.exists() else None

    combined = "\n".join(outputs)
    if document is None:
        if not errors:
            errors.append("PDF file was not generated")
        log_remote_body(f"local {compiler}", combined)

    return LocalCompilation(document=document, errors=errors, warnings=warnings, stdout=combined)
