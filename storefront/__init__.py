# Storefront: cart, live stock and per-seller checkout

__version__ = "1.0.0"
