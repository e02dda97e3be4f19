from smartshortener.services.constants import Dispatch
from smartshortener.services.accounting import VisitRecorder
from smartshortener.services.redirect import RedirectResolver, Resolution


__all__ = [
    'Dispatch',
    'VisitRecorder',
    'RedirectResolver',
    'Resolution',
]
