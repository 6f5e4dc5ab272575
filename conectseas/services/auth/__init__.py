from .backend import LoginResult, authenticate

__all__ = ["LoginResult", "authenticate"]
