# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Shared compiler infrastructure: source spans, diagnostics and the error model.
"""

__all__ = []
