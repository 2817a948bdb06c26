from .fixed import Address, Hash32

__all__ = ["Address", "Hash32"]
