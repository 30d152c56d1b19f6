"""Consola de administración para el backend de la tienda Vruksha."""

__version__ = '1.0.0'
