"""
Token request parameter validation.

Turns the raw, multi-valued form parameters of a token request into a
``TokenRequest``. Validation is pure: the first violated rule raises an
``OAuth2Error`` and nothing is aggregated.
"""

from typing import List, Mapping, Optional, Sequence, Union

from starlette.datastructures import ImmutableMultiDict

from ..shared.errors import InvalidRequestParameterError, UnsupportedGrantTypeError
from ..shared.oauth_models import GrantType, OAuth2ParameterNames, TokenRequest

RawParameters = Union[ImmutableMultiDict, Mapping[str, Union[str, Sequence[str]]]]

SUPPORTED_GRANT_TYPES = frozenset(grant_type.value for grant_type in GrantType)


def get_parameter_values(parameters: RawParameters, name: str) -> List[str]:
    """
    Return every value supplied for a parameter.

    Accepts Starlette form/query multi-dicts as well as plain mappings whose
    values are either a single string or a sequence of strings.
    """
    if isinstance(parameters, ImmutableMultiDict):
        return [str(value) for value in parameters.getlist(name)]

    values = parameters.get(name)
    if values is None:
        return []
    if isinstance(values, str):
        return [values]
    return [str(value) for value in values]


def get_single_parameter(parameters: RawParameters, name: str, required: bool = False) -> Optional[str]:
    """
    Return the single value of a parameter.

    Args:
        parameters: Raw request parameters
        name: Parameter name
        required: Whether an absent or empty value is an error

    Raises:
        InvalidRequestParameterError: If the parameter is repeated, or
            required and missing
    """
    values = get_parameter_values(parameters, name)
    if len(values) > 1:
        raise InvalidRequestParameterError(name)

    value = values[0] if values else None
    if required and not value:
        raise InvalidRequestParameterError(name)
    return value


def _reject_repeated(parameters: RawParameters, names: Sequence[str]) -> None:
    for name in names:
        if len(get_parameter_values(parameters, name)) > 1:
            raise InvalidRequestParameterError(name)


def validate_token_request(parameters: RawParameters) -> TokenRequest:
    """
    Validate token request parameters and build a ``TokenRequest``.

    Rules are checked in order: grant_type, client_id, the parameters of the
    requested grant, then any other recognized parameter.

    Args:
        parameters: Raw, multi-valued request parameters

    Returns:
        TokenRequest: The validated request

    Raises:
        InvalidRequestParameterError: invalid_request naming the parameter
        UnsupportedGrantTypeError: unsupported_grant_type naming grant_type
    """
    grant_type = get_single_parameter(parameters, OAuth2ParameterNames.GRANT_TYPE, required=True)
    if grant_type not in SUPPORTED_GRANT_TYPES:
        raise UnsupportedGrantTypeError(grant_type)

    client_id = get_single_parameter(parameters, OAuth2ParameterNames.CLIENT_ID)

    if grant_type == GrantType.AUTHORIZATION_CODE:
        code = get_single_parameter(parameters, OAuth2ParameterNames.CODE, required=True)
        redirect_uri = get_single_parameter(parameters, OAuth2ParameterNames.REDIRECT_URI)
        _reject_repeated(parameters, [OAuth2ParameterNames.SCOPE])

        return TokenRequest(
            grant_type=GrantType.AUTHORIZATION_CODE,
            code=code,
            redirect_uri=redirect_uri,
            client_id=client_id
        )

    scope = get_single_parameter(parameters, OAuth2ParameterNames.SCOPE)
    _reject_repeated(parameters, [OAuth2ParameterNames.CODE, OAuth2ParameterNames.REDIRECT_URI])

    return TokenRequest(
        grant_type=GrantType.CLIENT_CREDENTIALS,
        scope=scope,
        client_id=client_id
    )
