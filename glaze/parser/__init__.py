# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Glaze front end: lexer, structural reader and the value grammar.
"""

from __future__ import annotations

from . import ast
from .expr import parse_args, parse_value
from .lexer import Lexer, Token, TokenKind
from .parser import Parser, parse

__all__ = ["ast", "Lexer", "Token", "TokenKind", "Parser", "parse", "parse_value", "parse_args"]
