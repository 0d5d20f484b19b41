from tradewire.authorization.flow import AuthorizationFlow, CallbackOutcome

__all__ = ["AuthorizationFlow", "CallbackOutcome"]
