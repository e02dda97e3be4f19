from smartshortener.utils import initialize_logging


initialize_logging()
