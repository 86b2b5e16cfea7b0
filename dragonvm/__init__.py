"""A small stack-based virtual machine and macro assembler."""

__version__ = "0.1.0"
__all__ = ["assembler", "cli", "tokens", "vm"]