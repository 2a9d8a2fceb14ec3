import secrets
import string

from ..contracts.identity_record import MAX_IDENTITY_LENGTH, MIN_IDENTITY_LENGTH

LEADING = string.ascii_lowercase
ALPHABET = string.ascii_lowercase + string.digits


class IdentityGenerator:
    """
    Random package segments drawn from the OS CSPRNG.

    The first character is always a letter so the value stays a legal
    package segment. At the default length of 12 there are 26 * 36**11
    possible values.
    """

    def __init__(self, length: int = 12):
        if not MIN_IDENTITY_LENGTH <= length <= MAX_IDENTITY_LENGTH:
            raise ValueError(
                f"identity length must be within {MIN_IDENTITY_LENGTH}..{MAX_IDENTITY_LENGTH}, got {length}"
            )
        self.length = length

    def generate(self) -> str:
        head = secrets.choice(LEADING)
        tail = "".join(secrets.choice(ALPHABET) for _ in range(self.length - 1))
        return head + tail
