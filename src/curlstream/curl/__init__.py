"""
libcurl transfer engine binding.

Thin wrappers over pycurl that satisfy the Transfer and TransferSet shapes
consumed by ResponseStream. libcurl does all networking, TLS and redirect
handling; these classes only configure handles and forward callbacks.

References:
    - https://curl.se/libcurl/c/libcurl-multi.html
    - http://pycurl.io/docs/latest/curlmultiobject.html
"""

from .easy import CurlTransfer
from .multi import CurlMulti
from .options import RequestOptions

__all__ = [
    "CurlMulti",
    "CurlTransfer",
    "RequestOptions",
]
