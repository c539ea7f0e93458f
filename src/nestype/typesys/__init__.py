"""
Type system collaborator: typedefs, categorical types, instantiation.
"""

from .registry import Descriptor, TypeRegistry, TypeSystem

__all__ = ["Descriptor", "TypeRegistry", "TypeSystem"]
