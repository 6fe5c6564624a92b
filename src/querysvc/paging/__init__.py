"""Secure pagination cursors."""

from querysvc.paging.codec import PageTokenSecret, decode_page_token, encode_page_token

__all__ = ["PageTokenSecret", "decode_page_token", "encode_page_token"]
