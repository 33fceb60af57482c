"""Service registry for breaking circular imports.

This module holds the upstream client and request translator so that
routes can import them without causing circular imports with the main
module.
"""

# Set by create_app during initialization
client = None
request_translator = None


def set_services(client_instance, translator_instance):
    """Set the global upstream client and request translator."""
    global client, request_translator
    client = client_instance
    request_translator = translator_instance


def get_client():
    """Get the global upstream client."""
    if client is None:
        raise RuntimeError("Client not initialized. Did you call set_services?")
    return client


def get_request_translator():
    """Get the global request translator."""
    if request_translator is None:
        raise RuntimeError("Request translator not initialized. Did you call set_services?")
    return request_translator
