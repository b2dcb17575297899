"""
MoneyApp Core - Client Package

The networking and session core of the MoneyApp personal-finance client:
a typed HTTP client for the MoneyApp backend, JWT session tokens kept in
the OS keychain, and a polling loop that keeps the home dashboard fresh.

DESIGN PRINCIPLES:
1. The server's 401 is the authority on session validity
2. Every failure maps to one closed error kind with a user-safe message
3. Tokens are cleared on logout even when the network is down
4. Collaborators are injected, never looked up globally
5. Storage and transport are swappable
"""

__version__ = "1.0.0"
__author__ = "MoneyApp Team"
