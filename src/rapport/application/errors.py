"""Error taxonomy. Not-found on delete/accept/dismiss/edit is not an error and has no class here."""


class RapportError(RuntimeError):
    """Base error."""


class PersistenceError(RapportError):
    """Store unreachable, quota exceeded, or serialization failed. Surfaced to the caller, never retried."""


class ProfileLookupError(RapportError):
    """Profile lookup failed (non-2xx, timeout, malformed payload)."""


class ProfileNotFound(ProfileLookupError):
    """No profile matches the lookup."""
