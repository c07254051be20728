"""Order Desk: pack sizes, basket and delivery-quote requests for product pages."""

__version__ = "1.0.0"
