from modules.auth.interfaces import IAuthService
from modules.auth.service import AuthService


class TestAuthInterface:
    def test_interface_methods_exist(self):
        """IAuthService should define the identity operations."""
        for method in ["sign_in", "validate_token", "sign_out"]:
            assert hasattr(IAuthService, method)

    def test_auth_service_has_interface_methods(self):
        """AuthService should have all IAuthService methods."""
        for method in ["sign_in", "validate_token", "sign_out"]:
            assert callable(getattr(AuthService, method))
