"""
Pipeline de descubrimiento de atributos y materialización multilingüe
de valores para lugares (Google Places -> PostgreSQL).
"""

__version__ = "1.0.0"
