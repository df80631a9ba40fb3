"""
Repositorios sobre la base relacional.
"""
