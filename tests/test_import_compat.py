import cli
from authcode import errors, service


EXPECTED_CLI_EXPORTS = (
    "create_service",
    "parse_callback_url",
    "build_parser",
    "run",
    "main",
)

EXPECTED_ERRORS = (
    "AuthCodeError",
    "ConfigurationError",
    "AuthorizationRejectedError",
    "MalformedStateError",
    "StateMismatchError",
    "NotFoundError",
    "MissingRefreshTokenError",
    "ProviderFaultError",
    "ProviderError",
    "TokenResponseError",
)


def test_cli_export_surface() -> None:
    missing = [name for name in EXPECTED_CLI_EXPORTS if not hasattr(cli, name)]
    assert missing == []


def test_error_categories() -> None:
    missing = [name for name in EXPECTED_ERRORS if not hasattr(errors, name)]
    assert missing == []
    assert issubclass(errors.StateMismatchError, errors.AuthorizationRejectedError)
    assert issubclass(errors.ProviderError, errors.ProviderFaultError)
    assert not issubclass(errors.ProviderError, errors.AuthorizationRejectedError)


def test_service_is_importable() -> None:
    assert hasattr(service, "AuthorizationCodeService")
