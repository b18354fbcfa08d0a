"""Authorization and logout URL builders."""

from urllib.parse import urlencode

from authkit.oidc.types import AuthorizationUrlOptions, LogoutUrlOptions

AUTHORIZE_ENDPOINT = "oauth/authorize"
LOGOUT_ENDPOINT = "oidc/logout"
DEFAULT_SCOPES = ["openid", "profile", "email"]

_OPTIONAL_AUTHORIZE_PARAMS = (
    "state",
    "nonce",
    "login_hint",
    "domain_hint",
    "connection_id",
    "organization_id",
    "code_challenge",
    "code_challenge_method",
    "provider",
    "prompt",
)


def build_authorization_url(
    env_url: str,
    client_id: str,
    redirect_uri: str,
    options: AuthorizationUrlOptions | None = None,
) -> str:
    """Build ``{env_url}/oauth/authorize`` for the authorization code flow."""
    options = options or AuthorizationUrlOptions()
    scopes = DEFAULT_SCOPES if options.scopes is None else options.scopes
    params = {
        "response_type": "code",
        "client_id": client_id,
        "redirect_uri": redirect_uri,
        "scope": " ".join(scopes),
    }
    for name in _OPTIONAL_AUTHORIZE_PARAMS:
        value = getattr(options, name)
        if value:
            params[name] = value
    # the service also accepts the hint under its short name
    if options.domain_hint:
        params["domain"] = options.domain_hint
    return f"{env_url}/{AUTHORIZE_ENDPOINT}?{urlencode(sorted(params.items()))}"


def build_logout_url(env_url: str, options: LogoutUrlOptions | None = None) -> str:
    """Build ``{env_url}/oidc/logout`` with any supplied hints."""
    options = options or LogoutUrlOptions()
    params = {
        name: value
        for name, value in (
            ("id_token_hint", options.id_token_hint),
            ("post_logout_redirect_uri", options.post_logout_redirect_uri),
            ("state", options.state),
        )
        if value
    }
    url = f"{env_url}/{LOGOUT_ENDPOINT}"
    if not params:
        return url
    return f"{url}?{urlencode(sorted(params.items()))}"
