"""
Facet Module Entry Point
=========================

Allows running the Facet CLI via: python -m facet
"""

from facet.cli import main

if __name__ == "__main__":
    main()
