"""
Validation package.

Field rules applied before any write: identifier and username formats,
email shape, password length (and optional complexity), redirect URI
schemes, and update-field whitelists.
"""
