"""
Royalty Engine
Split models, pending payee resolution, recording payments and pass metering
"""

__version__ = "0.1.0"
