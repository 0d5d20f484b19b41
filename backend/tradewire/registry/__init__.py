from tradewire.registry.client_registry import ClientRegistry, ActiveClient

__all__ = ["ClientRegistry", "ActiveClient"]
