"""Church Atlas: map service for popes, saints and miracles."""

__version__ = '1.0.0'
