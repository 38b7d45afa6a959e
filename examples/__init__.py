"""
sqlalchemy-removable Examples

removable_example.py
    Registering removable models, removing and restoring records,
    scopes, hooks and validation on removal.

Run it standalone:

    python examples/removable_example.py
"""
