"""
Jack Compiler Python API

Provides the Python interface for compiling Jack classes to VM code.
"""

from .context import Context, CompiledClass, create_context, compile_class

__all__ = [
    'Context',
    'CompiledClass',
    'create_context',
    'compile_class',
]
