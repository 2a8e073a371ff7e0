from .identity_store import IdentityStore
from .tokens import decode_token, encode_token

__all__ = ["IdentityStore", "decode_token", "encode_token"]
