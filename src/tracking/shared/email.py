"""EmailAddress value object for account contact addresses."""

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import String

from tracking.domain import tracking

_FORBIDDEN_CHARACTERS = (";", ",", "(", ")", '"', ":", "<", ">", "[", "]", "\\")


@tracking.value_object
class EmailAddress:
    """A structurally valid email address.

    Exactly one ``@``, non-empty local and domain parts without leading,
    trailing or doubled dots, a dotted domain, and no whitespace or
    forbidden punctuation.
    """

    address = String(required=True, max_length=254)

    @invariant.post
    def address_must_be_well_formed(self):
        email = self.address
        if not _is_well_formed(email):
            raise ValidationError({"email": [f"Invalid email address: {email!r}"]})


def _is_well_formed(email: str) -> bool:
    if any(ch.isspace() for ch in email) or email.count("@") != 1:
        return False

    local_part, domain_part = email.split("@", 1)
    for part in (local_part, domain_part):
        if not part or part.startswith(".") or part.endswith(".") or ".." in part:
            return False

    if "." not in domain_part:
        return False
    if any(label.startswith("-") or label.endswith("-") for label in domain_part.split(".")):
        return False

    return not any(ch in email for ch in _FORBIDDEN_CHARACTERS)
