import hmac

def verify_authorization(*, secret: str, authorization: str | None) -> bool:
    """
    RevenueCat sends the value configured in its dashboard verbatim in the
    Authorization header. Compared in constant time; an unset secret
    rejects everything.
    """
    if not secret or not authorization:
        return False
    return hmac.compare_digest(authorization.encode("utf-8"), secret.encode("utf-8"))
