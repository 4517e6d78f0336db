from splitwizard.handlers.basic import basic_router
from splitwizard.handlers.entry import entry_router
from splitwizard.handlers.results import results_router

__all__ = ["basic_router", "entry_router", "results_router"]
