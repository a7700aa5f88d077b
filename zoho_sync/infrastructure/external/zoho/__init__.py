"""
Integración con Zoho CRM: autenticación OAuth y cliente COQL/REST.
"""

from .auth import ZohoAuthProvider
from .client import ZohoClient
from .types import ZohoCredentials, ZohoPage

__all__ = ["ZohoAuthProvider", "ZohoClient", "ZohoCredentials", "ZohoPage"]
