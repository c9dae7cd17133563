"""
Bearer tokens for the JSON API.

Tokens are signed with Django's SECRET_KEY via django.core.signing and
carry only the user's primary key. They expire after TOKEN_MAX_AGE seconds.
"""
from django.contrib.auth import get_user_model
from django.core import signing

from .conf import blog_settings


def issue_token(user):
    """Return a signed token identifying user."""
    return signing.dumps({"id": user.pk}, salt=blog_settings.TOKEN_SALT, compress=True)


def read_token(token):
    """
    Return the payload of a token.

    Raises signing.SignatureExpired for expired tokens and
    signing.BadSignature for anything tampered with or malformed.
    """
    return signing.loads(token, salt=blog_settings.TOKEN_SALT, max_age=blog_settings.TOKEN_MAX_AGE)


def user_for_token(token):
    """Return the user a valid token belongs to, or None if the user is gone."""
    payload = read_token(token)
    User = get_user_model()
    return User.objects.filter(pk=payload.get("id")).first()


def bearer_token(request):
    """Extract the token from an ``Authorization: Bearer <token>`` header."""
    header = request.headers.get("Authorization", "")
    if not header.startswith("Bearer"):
        return None
    parts = header.split()
    if len(parts) != 2:
        return None
    return parts[1]
