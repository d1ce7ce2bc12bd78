"""
Couche infrastructure de mediacat.

- persistence/ : catalogue et files d'attente sur SQLite (SQLModel)
"""
