from .hianime import HianimeScraper

__all__ = ["HianimeScraper"]
