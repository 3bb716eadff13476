"""
Identification headers sent with object reads.

Shared by the server and the client, so nothing here imports a web
framework. Names are carried as percent-encoded UTF-8: header values are
latin-1 on the wire and display names can be anything, so every name is
encoded the same way and a client can always decode it.
"""

from urllib.parse import quote, unquote

BUCKET_NAME_HEADER = "X-Buckets-Bucket-Name"
OBJECT_NAME_HEADER = "X-Buckets-Object-Name"
OBJECT_ID_HEADER = "X-Buckets-Object-ID"

IDENTIFICATION_HEADERS = (BUCKET_NAME_HEADER, OBJECT_NAME_HEADER, OBJECT_ID_HEADER)


def encode_name(value: str) -> str:
    """Percent-encode a name for a header value, slashes and spaces included."""
    return quote(value, safe="")


def decode_name(value: str) -> str:
    return unquote(value)
