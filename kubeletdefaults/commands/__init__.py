from . import apply, validate

__all__ = ['apply', 'validate']
