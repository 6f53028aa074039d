"""auth/ -- Sign-in, sign-up, and sign-out for the issue tracker.

actions.py holds the auth flow; everything else in the package is a
collaborator it is wired to (store, tokens, session, dal) or a type it
returns (results, models).

Layer rule: auth/ imports only core/, stdlib, and third-party libraries.
It does NOT import from api/ or web/. api/ and web/ import from auth/,
not the other way around.
"""
