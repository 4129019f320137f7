"""
attestkit: environment configuration and downstream clients for attestation services.
"""

__version__ = "0.1.0"
