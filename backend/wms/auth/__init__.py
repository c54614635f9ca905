from .security import decode_access_token, get_username_from_request

__all__ = ['decode_access_token', 'get_username_from_request']
