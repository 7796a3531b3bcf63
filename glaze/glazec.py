# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
`glazec`: compile one `.glz` file into `<stem>.css` and `<stem>.js`.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from glaze.compiler import compile_file
from glaze.config import find_config
from glaze.core.diagnostics import Diagnostic
from glaze.core.errors import ConfigError, GlazeError, SourceLoadError

logger = logging.getLogger(__name__)

SOURCE_SUFFIX = ".glz"


def _diag_to_json(diag: Diagnostic, source: Path) -> dict:
	"""Render a Diagnostic to a structured JSON-friendly dict."""
	payload = diag.to_dict()
	if payload["file"] is None:
		payload["file"] = str(source)
	return payload


def _configure_logging(verbosity: int) -> None:
	level = logging.WARNING
	if verbosity == 1:
		level = logging.INFO
	elif verbosity >= 2:
		level = logging.DEBUG
	logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s", stream=sys.stderr)


def _report(err: GlazeError, source: Path, as_json: bool) -> int:
	# Config errors already name their file in the message.
	file = None if isinstance(err, ConfigError) else str(source)
	diag = err.to_diagnostic(file=file)
	if as_json:
		print(json.dumps({"exit_code": 1, "diagnostics": [_diag_to_json(diag, source)]}))
	else:
		print(diag.format_human(), file=sys.stderr)
	return 1


def main(argv: list[str] | None = None) -> int:
	"""
	Compile a glaze file.

	With --json, prints structured diagnostics (phase/message/severity/file/line/column/code)
	and an exit_code; otherwise prints human-readable messages to stderr.
	"""
	parser = argparse.ArgumentParser(prog="glazec", description="Compile a glaze stylesheet to CSS")
	parser.add_argument("input", type=Path, help="Path to a .glz source file")
	parser.add_argument(
		"output_dir",
		type=Path,
		nargs="?",
		help="Directory for the generated .css/.js files (default: config outDir, else the current directory)",
	)
	parser.add_argument("-p", "--production", action="store_true", help="Emit compact CSS without comments")
	parser.add_argument("--stdout", action="store_true", help="Print the CSS instead of writing files")
	parser.add_argument(
		"--json",
		action="store_true",
		help="Emit diagnostics as JSON (phase/message/severity/file/line/column/code)",
	)
	parser.add_argument("--config", type=Path, help="Path to a glaze.json config (default: ./glaze.json if present)")
	parser.add_argument("-v", "--verbose", action="count", default=0, help="Log progress (-vv for debug output)")
	args = parser.parse_args(argv)
	_configure_logging(args.verbose)

	source_path: Path = args.input
	try:
		if source_path.suffix != SOURCE_SUFFIX:
			raise SourceLoadError(f"Glaze files must end with {SOURCE_SUFFIX} extension")
		config = find_config(args.config)
		compact = args.production or config.compact
		css, js = compile_file(source_path, compact=compact)
	except GlazeError as err:
		return _report(err, source_path, args.json)

	if args.stdout:
		sys.stdout.write(css)
		return 0

	out_dir = args.output_dir or config.out_dir or Path(".")
	stem = source_path.stem
	try:
		out_dir.mkdir(parents=True, exist_ok=True)
		(out_dir / f"{stem}.css").write_text(css, encoding="utf-8")
		(out_dir / f"{stem}.js").write_text(js, encoding="utf-8")
	except OSError as err:
		return _report(SourceLoadError(f"cannot write output to {out_dir}: {err.strerror}"), source_path, args.json)
	logger.info("wrote %s and %s", out_dir / f"{stem}.css", out_dir / f"{stem}.js")
	if args.json:
		print(json.dumps({"exit_code": 0, "diagnostics": []}))
	return 0


__all__ = ["main"]
