import typing as t

from taskrelay.config import get_package_identity

HeadersFactory = t.Callable[[], dict[str, str]]


def create_api_headers(package_name: str, package_version: str, api_token: str) -> HeadersFactory:
    """Create a factory producing fresh task API headers on every call

    Args:
        package_name (str): Name used in the user agent
        package_version (str): Version used in the user agent
        api_token (str): Task API token

    Returns:
        HeadersFactory: Zero-argument callable returning a new headers dict
    """

    def headers_fn() -> dict[str, str]:
        return {
            "user-agent": f"{package_name}/{package_version}",
            "authorization": f"apikey {api_token}",
            "Content-Type": "application/json",
        }

    return headers_fn


def create_default_api_headers(api_token: str) -> HeadersFactory:
    package_name, package_version = get_package_identity()
    return create_api_headers(package_name, package_version, api_token)
