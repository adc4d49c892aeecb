"""
Marketplace Dispatch Service.

Job lifecycle, router claims, contractor dispatch, routing SLA monitoring
and escrow payments for a home-services marketplace.
"""

__version__ = "0.1.0"
__description__ = "Marketplace Dispatch Service"
