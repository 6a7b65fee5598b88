"""Prompt assembly for the analysis stages."""

from .builder import PromptBuilder, format_file_blocks

__all__ = ["PromptBuilder", "format_file_blocks"]
