"""Reduce author e-mail addresses to organisation domains."""


def email_to_domain(email: str) -> str:
    """Strip the local part and trim the host to its registrable domain.

    If the last label looks like a country code and the one before it is
    2-3 letters, the address is likely of the form ``x.ac.uk`` or
    ``x.com.au`` and three labels are kept. Otherwise two, as in ``x.org``.

    >>> email_to_domain("Jane@Mail.Example.ORG")
    'example.org'
    >>> email_to_domain("joe@cs.ox.ac.uk")
    'ox.ac.uk'
    """
    email = email.lower()
    at = email.rfind("@")
    if at >= 0:
        email = email[at + 1 :]

    labels = email.split(".")
    n = len(labels)
    if n <= 2:
        # Already minimal, or malformed
        return email

    if len(labels[-1]) < 3 and len(labels[-2]) < 4:
        return ".".join(labels[-3:])
    return ".".join(labels[-2:])
