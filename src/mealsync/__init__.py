"""
Mealie shopping-list synchronization package.

The package keeps a local shopping list consistent with a Mealie server under optimistic
mutation and imports the ingredients of scheduled meal-plan recipes.
"""

__all__ = ["__version__"]

__version__ = "0.1.0"
