from .auth_manager import AuthManager, build_headers

__all__ = ["AuthManager", "build_headers"]
