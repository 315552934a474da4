"""Parsing utilities for CUE sources and existing build files."""

from parse.build_files import BuildFile, find_build_file, load_build_file
from parse.cue_files import SourceFile, parse_cue_file, parse_cue_source

__all__ = [
    "BuildFile",
    "SourceFile",
    "find_build_file",
    "load_build_file",
    "parse_cue_file",
    "parse_cue_source",
]
