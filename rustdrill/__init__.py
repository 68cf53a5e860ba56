"""Compile, run, verify, watch and grade small Rust exercises from the terminal."""

__version__ = "5.5.1"