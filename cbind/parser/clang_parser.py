"""
Clang-based C parser.

Uses libclang to parse C headers or in-memory sources into a ``NativeUnit``
the translator can walk.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from clang.cindex import Index, TranslationUnitLoadError

from ..errors import ParseError
from .native import NativeUnit

logger = logging.getLogger("cbind.parser")


class ClangParser:
    """
    Parser for C sources using libclang.

    Error diagnostics abort the parse; warnings are logged.
    """

    def __init__(
        self,
        include_dirs: Optional[list[Path]] = None,
        defines: Optional[dict[str, str]] = None,
        clang_args: Optional[list[str]] = None,
        std: str = "c99",
    ):
        """
        Initialize the parser.

        Args:
            include_dirs: Additional include directories
            defines: Preprocessor macro definitions
            clang_args: Extra arguments to pass to clang
            std: C language standard passed as ``-std=``
        """
        self.include_dirs = include_dirs or []
        self.defines = defines or {}
        self.clang_args = clang_args or []
        self.std = std

        self._index = Index.create()

    def _build_args(self) -> list[str]:
        """Build clang argument list."""
        args = ["-x", "c", f"-std={self.std}"]

        # Add include directories
        for inc in self.include_dirs:
            args.append(f"-I{inc}")

        # Add defines
        for name, value in self.defines.items():
            if value:
                args.append(f"-D{name}={value}")
            else:
                args.append(f"-D{name}")

        # Add extra args
        args.extend(self.clang_args)

        return args

    def parse(self, header_path: Path) -> NativeUnit:
        """
        Parse a C header file.

        Args:
            header_path: Path to the header file

        Returns:
            NativeUnit over the parsed translation unit
        """
        source = header_path.read_bytes()
        return self._parse(header_path, source, unsaved_files=None)

    def parse_source(self, source: str, filename: str = "input.h") -> NativeUnit:
        """Parse C source text as if it were the file ``filename``."""
        return self._parse(
            Path(filename),
            source.encode("utf-8"),
            unsaved_files=[(filename, source)],
        )

    def _parse(self, path: Path, source: bytes, unsaved_files) -> NativeUnit:
        args = self._build_args()
        logger.debug("Parsing %s with %s", path, " ".join(args))

        try:
            tu = self._index.parse(str(path), args=args, unsaved_files=unsaved_files)
        except TranslationUnitLoadError as e:
            raise ParseError(f"Failed to parse {path}: {e}") from e

        # Check for errors
        errors = [d for d in tu.diagnostics if d.severity >= 3]
        if errors:
            error_msgs = "\n".join(str(e) for e in errors[:5])
            raise ParseError(f"Parse errors in {path}:\n{error_msgs}")

        for diag in tu.diagnostics:
            if diag.severity == 2:
                logger.warning("%s", diag)

        return NativeUnit(tu, path, source)
