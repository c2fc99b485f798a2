"""Error handling utilities."""


class BuyHomeError(Exception):
    """Base exception for BuyHome backend."""
    pass


class StorageError(BuyHomeError):
    """Storage (Supabase or in-memory) operation error."""
    pass


class InviteCodeError(BuyHomeError):
    """Invite code issuance error."""
    pass


class InviteCodeCollisionError(InviteCodeError):
    """Generated invite code already exists in the store."""
    pass


class SignupError(BuyHomeError):
    """Signup failed; message is safe to show to the user."""
    pass


class AssistantError(BuyHomeError):
    """Chat assistant API error."""
    pass


class RunPollingTimeout(AssistantError):
    """Run did not reach a terminal status within the polling budget."""
    pass


class ContactRelayError(BuyHomeError):
    """Contact form relay error."""
    pass


class ClientNotFoundError(BuyHomeError):
    """Realtor or buyer client not found, or the buyer belongs to another realtor."""
    pass
