from .handler import handle

__all__ = ["handle"]
