# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Compiler entry points.

`compile_source` is the core contract: glaze source text in, `(css, js)` out,
or a `GlazeError`. Every call builds its own parser and generator, so calls
share no state.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Tuple, Union

from glaze.core.errors import SourceLoadError
from glaze.generator import Generator
from glaze.parser import parse

logger = logging.getLogger(__name__)


def compile_source(source: str, *, compact: bool = False) -> Tuple[str, str]:
	nodes = parse(source)
	css, js = Generator(compact=compact).generate(nodes)
	logger.debug("compiled %d root nodes into %d bytes of css", len(nodes), len(css))
	return css, js


def load_source(path: Union[str, Path]) -> str:
	"""Read a source file as UTF-8; failures surface as `SourceLoadError`."""
	path = Path(path)
	try:
		return path.read_text(encoding="utf-8")
	except FileNotFoundError:
		raise SourceLoadError(f"file not found: {path}") from None
	except UnicodeDecodeError as err:
		raise SourceLoadError(f"{path} is not valid UTF-8: {err.reason} at byte {err.start}") from None
	except OSError as err:
		raise SourceLoadError(f"cannot read {path}: {err.strerror}") from None


def compile_file(path: Union[str, Path], *, compact: bool = False) -> Tuple[str, str]:
	return compile_source(load_source(path), compact=compact)


__all__ = ["compile_source", "compile_file", "load_source"]
