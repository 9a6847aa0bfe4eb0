"""Services for the sitter gateway."""

from sitter_gateway.services.signup import SignupSaga

__all__ = ["SignupSaga"]
