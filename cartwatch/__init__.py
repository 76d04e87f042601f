"""
cartwatch: cart-abandonment detection agent.

Polls a fixed set of user carts on an interval, enriches non-empty carts with
pricing and category data from the product catalog, tracks how long each user
has been inactive, and decides whether to send a discount offer. Modular
architecture: service clients, inactivity tracker, cart enricher, decision
engine, notifier and the scheduler that drives them.
"""

__version__ = "0.1.0"
