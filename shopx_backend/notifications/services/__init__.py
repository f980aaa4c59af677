from .email import notify

__all__ = ["notify"]
