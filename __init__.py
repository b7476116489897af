"""
License Gate Service

Decides whether a plugin update (metadata download URL or package file) may
be handed out, by checking the requester's license against the WooCommerce
software API mirrors: license status, activation platform and the version
the license covers.
"""

__version__ = "1.0.0"
