"""
Authentication Use Cases

Server side of the local identity provider.
"""

from .sign_up_use_case import SignUpUseCase
from .sign_in_use_case import SignInUseCase
from .refresh_session_use_case import RefreshSessionUseCase
from .sign_out_use_case import SignOutUseCase

__all__ = [
    "SignUpUseCase",
    "SignInUseCase",
    "RefreshSessionUseCase",
    "SignOutUseCase",
]
