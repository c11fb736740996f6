from django.core.signing import TimestampSigner

_signer = TimestampSigner(salt="eventhub.ticket")

# Signed ticket links stay valid for a week.
DEFAULT_MAX_AGE = 7 * 24 * 3600


def make_email_token(payload: str) -> str:
    return _signer.sign(payload)


def read_email_token(token: str, max_age_seconds: int = DEFAULT_MAX_AGE) -> str:
    return _signer.unsign(token, max_age=max_age_seconds)
