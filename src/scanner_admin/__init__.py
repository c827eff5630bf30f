"""
Administrative front end for the job scanner scraping service.
"""

__version__ = "0.1.0"
