"""Error handling utilities."""


class Imoveis77Error(Exception):
    """Base exception for the Imoveis77 backend."""
    pass


class ValidationIgnored(Imoveis77Error):
    """Malformed filter input that is normalized to "absent".

    Raised by the filter parsers and always caught by the canonicalizer;
    URLs are user-editable, so this never reaches the caller.
    """

    def __init__(self, field: str, raw: object, reason: str = "invalid value"):
        self.field = field
        self.raw = raw
        self.reason = reason
        super().__init__(f"{field}: {reason} ({raw!r})")


class StoreUnavailable(Imoveis77Error):
    """Property store query failed."""
    pass


class SupabaseError(Imoveis77Error):
    """Supabase operation error."""
    pass


class NotAuthenticated(Imoveis77Error):
    """Operation requires a signed-in user."""
    pass


class PermissionDenied(Imoveis77Error):
    """User role is not allowed to perform the operation."""
    pass


class PropertyNotFound(Imoveis77Error):
    """Property lookup returned nothing."""
    pass


class PhotoNotFound(PropertyNotFound):
    """Photo lookup returned nothing."""
    pass
