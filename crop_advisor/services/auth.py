"""
Identity lookup
Resolves a Supabase access token to the user id used to key prediction history
"""

import logging
from typing import Optional

logger = logging.getLogger(__name__)


def extract_bearer_token(authorization: Optional[str]) -> Optional[str]:
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


async def resolve_user_id(client, authorization: Optional[str]) -> Optional[str]:
    """
    Returns:
        Supabase user id, or None for anonymous / invalid sessions
    """
    token = extract_bearer_token(authorization)
    if not token or not client:
        return None

    try:
        response = client.auth.get_user(token)
    except Exception as e:
        logger.warning(f"Could not resolve user from access token: {e}")
        return None

    user = getattr(response, "user", None)
    if not user:
        return None
    return str(user.id)
